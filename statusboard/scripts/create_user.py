#!/usr/bin/env python3
# SPDX-License-Identifier: Apache-2.0

"""
Script to seed a user account.

Usage: python -m statusboard.scripts.create_user EMAIL USERNAME [--admin]

The password is read from STATUSBOARD_PASSWORD or prompted for.
"""

import argparse
import getpass
import logging
import os
import sys
from typing import List, Optional

from ..middleware.error_handler import CustomException
from ..services.auth import AuthService
from ..services.mongodb import MongoDBService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Create a status board user")
    parser.add_argument("email", help="Login email")
    parser.add_argument("username", help="Display name")
    parser.add_argument("--admin", action="store_true", help="Allow managing the news feed")
    return parser


def main(argv: Optional[List[str]] = None, mongodb_service: MongoDBService = None,
         password: Optional[str] = None) -> int:
    args = build_parser().parse_args(argv)

    password = password or os.getenv("STATUSBOARD_PASSWORD") or getpass.getpass("Password: ")
    if not password:
        logger.error("Password cannot be empty")
        return 1

    mongodb_service = mongodb_service or MongoDBService()
    auth_service = AuthService(mongodb_service, int(os.getenv('BCRYPT_ROUNDS', '12')))
    try:
        user = auth_service.create_user(args.email, args.username, password, is_admin=args.admin)
    except CustomException as e:
        logger.error(f"Failed to create user: {e.message}")
        return 1

    logger.info(f"Created user {user.email} ({'admin' if user.is_admin else 'reporter'}) uid={user.uid}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
