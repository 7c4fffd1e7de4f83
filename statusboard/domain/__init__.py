# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the status board.

Address space, time formatting and derived board views live here as pure
functions with no side effects, testable without external services.
"""
