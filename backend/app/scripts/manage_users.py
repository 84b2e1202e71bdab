"""
Staff User Management
=====================
Staff accounts are provisioned here, never through the HTTP API. New and
reset accounts must change their password on first login.

Usage:
    ranz-survey-users init-db
    ranz-survey-users create admin@ranz.co.nz
    ranz-survey-users create admin@ranz.co.nz --password 'TempPass123'
    ranz-survey-users reset admin@ranz.co.nz

Or: python -m app.scripts.manage_users <command> ...
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from app.core.config import settings
from app.core.database import Database
from app.core.exceptions import SurveyError
from app.services.credentials import CredentialService


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ranz-survey-users",
        description="Provision staff accounts for the survey admin export",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create database tables")

    create = subparsers.add_parser("create", help="Create a staff account")
    create.add_argument("email")
    create.add_argument("--password", help="Initial password (generated when omitted)")

    reset = subparsers.add_parser("reset", help="Set a temporary password and force a change")
    reset.add_argument("email")
    reset.add_argument("--password", help="Temporary password (generated when omitted)")

    return parser


async def run(args: argparse.Namespace, database: Optional[Database] = None) -> str:
    """Execute one command and return the message to print"""
    database = database or Database(settings)
    database.connect()
    try:
        await database.create_tables()
        if args.command == "init-db":
            return "Database tables ready"

        async with database.session() as session:
            service = CredentialService(session)
            if args.command == "create":
                user, password = await service.create_user(args.email, args.password)
                return (
                    f"Created staff user {user.email}\n"
                    f"Initial password: {password}\n"
                    "The password must be changed on first login."
                )
            if args.command == "reset":
                password = await service.reset_password(args.email, args.password)
                return (
                    f"Reset password for {args.email.strip().lower()}\n"
                    f"Temporary password: {password}\n"
                    "The password must be changed on next login."
                )
        raise ValueError(f"Unknown command: {args.command}")
    finally:
        await database.dispose()


def main(argv: Optional[List[str]] = None) -> int:
    args = create_parser().parse_args(argv)
    try:
        print(asyncio.run(run(args)))
    except SurveyError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
