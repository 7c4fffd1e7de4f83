# SPDX-License-Identifier: Apache-2.0

"""
Residential emergency status board.

Residents report the safety status of individual rooms across the blocks of
a housing estate, and administrators publish a short news feed.
"""

__version__ = "1.0.0"
