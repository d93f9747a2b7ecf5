"""Administrative command line interface.

Provides operational tools for:
- Creating the database schema
- Seeding portal accounts (including the first administrator)

Usage:
    payroll-recon-admin create-schema
    payroll-recon-admin create-user --email a@example.com --name "Ada" --role admin
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from decimal import Decimal, InvalidOperation
from typing import Callable
from uuid import UUID

from payroll_recon.config import configure_logging
from payroll_recon.database import create_schema, dispose_db, get_session
from payroll_recon.exceptions import ReconciliationError
from payroll_recon.models import UserRole
from payroll_recon.services.user_service import UserService


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


def parse_decimal(s: str) -> Decimal:
    """Parse a decimal amount."""
    try:
        return Decimal(s)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f"Invalid amount: {s}")


class AdminCli:
    """Administrative Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="payroll-recon-admin",
            description="Payroll reconciliation administrative tools",
        )
        parser.add_argument(
            "--log-level",
            default=None,
            help="Override LOG_LEVEL for this command",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # create-schema command
        subparsers.add_parser(
            "create-schema",
            help="Create all tables that do not exist yet",
        )

        # create-user command
        user = subparsers.add_parser(
            "create-user",
            help="Create a portal account",
        )
        user.add_argument("--email", required=True, help="Login email")
        user.add_argument("--name", required=True, help="Display name")
        user.add_argument(
            "--role",
            choices=[r.value for r in UserRole],
            default=UserRole.EMPLOYEE.value,
            help="Portal role (default: employee)",
        )
        user.add_argument(
            "--password",
            help="Initial password (prompted for when omitted)",
        )
        user.add_argument(
            "--employer-id",
            type=parse_uuid,
            help="Employer the account reports to",
        )
        user.add_argument(
            "--hourly-rate",
            type=parse_decimal,
            help="Hourly rate used by hours reports",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return 1

        configure_logging(parsed.log_level)

        # Dispatch to command handler
        handlers: dict[str, Callable[..., int]] = {
            "create-schema": self._cmd_create_schema,
            "create-user": self._cmd_create_user,
        }

        handler = handlers.get(parsed.command)
        if handler:
            return handler(parsed)

        print(f"Unknown command: {parsed.command}", file=sys.stderr)
        return 1

    def _cmd_create_schema(self, args: argparse.Namespace) -> int:
        """Create database tables."""

        async def _run() -> None:
            try:
                await create_schema()
            finally:
                await dispose_db()

        asyncio.run(_run())
        print("Schema created")
        return 0

    def _cmd_create_user(self, args: argparse.Namespace) -> int:
        """Create a portal account."""
        password = args.password or getpass.getpass("Password: ")

        async def _run() -> UUID:
            try:
                async with get_session() as session:
                    user = await UserService(session).create_user(
                        email=args.email,
                        name=args.name,
                        password=password,
                        role=args.role,
                        employer_id=args.employer_id,
                        hourly_rate=args.hourly_rate,
                    )
                    return user.user_id
            finally:
                await dispose_db()

        try:
            user_id = asyncio.run(_run())
        except ReconciliationError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

        print(f"Created {args.role} {args.email}: {user_id}")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = AdminCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
