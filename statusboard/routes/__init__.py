# SPDX-License-Identifier: Apache-2.0

"""
API blueprints: authentication, blocks and room statuses, news.
"""
