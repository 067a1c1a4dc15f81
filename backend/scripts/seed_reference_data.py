#!/usr/bin/env python3
"""Seed the default positions and departments into the hosted backend.

Run from the backend/ directory:

    python3 scripts/seed_reference_data.py [--dry-run] [--verbose] [--email E --password P]

Rows whose title (positions) or name (departments) already exist are skipped,
so the script can be re-run safely. Sign in with an HR manager account when the
backend's row policies do not allow anonymous inserts.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Any

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from rhdocs.core.config import Settings  # noqa: E402
from rhdocs.services.backend_client import BackendClient, BackendError, BackendScope  # noqa: E402
from rhdocs.services.employee_directory import DEPARTMENTS_TABLE, POSITIONS_TABLE  # noqa: E402

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENTS = [
    "Recursos Humanos",
    "Tecnologia",
    "Comercial",
    "Financeiro",
    "Marketing",
    "Operações",
    "Jurídico",
    "Administrativo",
]

DEFAULT_POSITIONS = [
    "Estagiário",
    "Assistente",
    "Analista Junior",
    "Analista Pleno",
    "Analista Senior",
    "Coordenador",
    "Supervisor",
    "Gerente",
    "Diretor",
]


def missing_rows(existing: list[dict[str, Any]], key: str, wanted: list[str]) -> list[dict[str, str]]:
    """Return insert payloads for every wanted label not already present (case-insensitive)."""
    present = {str(row.get(key, "")).strip().lower() for row in existing}
    return [{key: label} for label in wanted if label.strip().lower() not in present]


async def seed_table(
    scope: BackendScope,
    table: str,
    key: str,
    wanted: list[str],
    *,
    dry_run: bool,
) -> tuple[int, int]:
    existing = await scope.select(table, order=key)
    rows = missing_rows(existing, key, wanted)
    skipped = len(wanted) - len(rows)

    if dry_run:
        for row in rows:
            logger.info("[DRY RUN] Would insert into %s: %s", table, row[key])
        return 0, skipped

    inserted = 0
    for row in rows:
        try:
            await scope.insert(table, row)
            inserted += 1
            logger.debug("Inserted %s into %s", row[key], table)
        except BackendError as e:
            logger.error("Failed to insert %s into %s: %s", row[key], table, e.message)
    return inserted, skipped


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Seed default positions and departments into the RH-DOCS backend",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report what would be inserted without writing anything",
    )
    parser.add_argument(
        "--email",
        default=None,
        help="Sign in with this account before inserting",
    )
    parser.add_argument(
        "--password",
        default=None,
        help="Password for --email",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    args = parser.parse_args(argv)
    if bool(args.email) != bool(args.password):
        parser.error("--email and --password must be given together")
    return args


async def seed(args: argparse.Namespace) -> None:
    settings = Settings()
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    client = BackendClient()
    await client.initialize(settings)
    try:
        scope = client.scope()
        if args.email:
            logger.info("Signing in as %s...", args.email)
            await scope.auth.sign_in_with_password(args.email, args.password)

        for table, key, wanted in (
            (DEPARTMENTS_TABLE, "name", DEFAULT_DEPARTMENTS),
            (POSITIONS_TABLE, "title", DEFAULT_POSITIONS),
        ):
            inserted, skipped = await seed_table(scope, table, key, wanted, dry_run=args.dry_run)
            logger.info("%s: %d inserted, %d already present", table, inserted, skipped)

        if args.email:
            await scope.auth.sign_out()
    finally:
        await client.close()

    if args.dry_run:
        logger.info("[DRY RUN] No rows were written.")


def main() -> None:
    args = parse_args()
    asyncio.run(seed(args))


if __name__ == "__main__":
    main()
