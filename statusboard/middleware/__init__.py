# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

Session authentication, CORS and centralized error handling.
"""
