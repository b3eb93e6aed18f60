#!/usr/bin/env python3
"""
Issue an administrator bearer token for the signlink admin API.

Usage:
    python scripts/issue_admin_token.py --admin-id 42 --email admin@example.com
"""

import argparse

from signlink.api.auth import generate_admin_token
from signlink.config import Settings


def main():
    parser = argparse.ArgumentParser(description="Issue an admin JWT for the signlink API")
    parser.add_argument("--admin-id", required=True, help="Administrator identifier stored on created documents")
    parser.add_argument("--email", required=True, help="Administrator email")
    args = parser.parse_args()

    settings = Settings.from_env()
    token = generate_admin_token(settings, args.admin_id, args.email)
    print(f"Authorization: Bearer {token}")
    print(f"Valid for {settings.jwt_expiry_days} days")


if __name__ == "__main__":
    main()
