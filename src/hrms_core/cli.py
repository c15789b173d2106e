"""HRMS Command Line Interface.

Operational tools for scheduled and maintenance jobs:
- Schema creation
- Automated compliance checks
- Violation alert dispatch
- Notification cleanup
- Leave carry-forward

Usage:
    python -m hrms_core.cli init-db
    python -m hrms_core.cli compliance-sweep [--organization-id X]
    python -m hrms_core.cli send-alerts
    python -m hrms_core.cli purge-notifications [--retention-days N]
    python -m hrms_core.cli carry-forward --from-year 2025 --to-year 2026
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Awaitable, Callable, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.config import get_settings
from hrms_core.database import create_schema, dispose_db, get_session
from hrms_core.logging_config import configure_logging
from hrms_core.services import ComplianceService, LeaveService, NotificationService

logger = logging.getLogger(__name__)

T = TypeVar("T")


def parse_uuid(s: str) -> UUID:
    """Parse UUID string."""
    return UUID(s)


class HRMSCli:
    """HRMS Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="python -m hrms_core.cli",
            description="HRMS operational tools",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            help="Override LOG_LEVEL for this run",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        subparsers.add_parser("init-db", help="Create database tables")

        sweep = subparsers.add_parser(
            "compliance-sweep",
            help="Run automated compliance checks that are due",
        )
        sweep.add_argument(
            "--organization-id",
            type=parse_uuid,
            help="Limit the sweep to one organization",
        )

        subparsers.add_parser(
            "send-alerts",
            help="Send alerts for non-compliant checks not yet alerted",
        )

        purge = subparsers.add_parser(
            "purge-notifications",
            help="Delete expired notifications and old read ones",
        )
        purge.add_argument(
            "--retention-days",
            type=int,
            help="Keep read notifications newer than this (default: NOTIFICATION_RETENTION_DAYS)",
        )

        carry = subparsers.add_parser(
            "carry-forward",
            help="Carry unused leave into the next year",
        )
        carry.add_argument("--from-year", type=int, required=True)
        carry.add_argument("--to-year", type=int, required=True)
        carry.add_argument(
            "--organization-id",
            type=parse_uuid,
            help="Limit carry-forward to one organization",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)
        configure_logging(parsed.log_level or get_settings().log_level)

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], Awaitable[int]]] = {
            "init-db": self._cmd_init_db,
            "compliance-sweep": self._cmd_compliance_sweep,
            "send-alerts": self._cmd_send_alerts,
            "purge-notifications": self._cmd_purge_notifications,
            "carry-forward": self._cmd_carry_forward,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return 1
        return asyncio.run(self._execute(handler, parsed))

    async def _execute(
        self,
        handler: Callable[[argparse.Namespace], Awaitable[int]],
        args: argparse.Namespace,
    ) -> int:
        try:
            return await handler(args)
        finally:
            await dispose_db()

    @staticmethod
    async def _in_session(job: Callable[[AsyncSession], Awaitable[T]]) -> T:
        async with get_session() as session:
            return await job(session)

    async def _cmd_init_db(self, args: argparse.Namespace) -> int:
        await create_schema()
        print("Database schema created.")
        return 0

    async def _cmd_compliance_sweep(self, args: argparse.Namespace) -> int:
        async def job(session: AsyncSession) -> int:
            service = ComplianceService(session)
            if args.organization_id:
                return await service.execute_automated_compliance_checks_for_organization(
                    args.organization_id
                )
            return await service.execute_automated_compliance_checks()

        performed = await self._in_session(job)
        print(f"Compliance checks performed: {performed}")
        return 0

    async def _cmd_send_alerts(self, args: argparse.Namespace) -> int:
        sent = await self._in_session(
            lambda session: ComplianceService(session).send_pending_violation_alerts()
        )
        print(f"Violation alerts sent: {sent}")
        return 0

    async def _cmd_purge_notifications(self, args: argparse.Namespace) -> int:
        retention_days = args.retention_days or get_settings().notification_retention_days

        async def job(session: AsyncSession) -> tuple[int, int]:
            service = NotificationService(session)
            expired = await service.cleanup_expired_notifications()
            read = await service.purge_read_notifications(retention_days)
            return expired, read

        expired, read = await self._in_session(job)
        print(f"Expired notifications removed: {expired}")
        print(f"Read notifications older than {retention_days} days removed: {read}")
        return 0

    async def _cmd_carry_forward(self, args: argparse.Namespace) -> int:
        touched = await self._in_session(
            lambda session: LeaveService(session).process_carry_forward(
                args.from_year, args.to_year, args.organization_id
            )
        )
        print(f"Leave balances carried forward: {touched}")
        return 0


def main() -> int:
    """CLI entry point."""
    cli = HRMSCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
