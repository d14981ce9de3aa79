"""
Command-line entry point for the field operations ledger.

Operates on a ``SqlAlchemyStore`` (URL from ``--db`` or ``FIELDOPS_DB_URL``;
default is a SQLite file in the working directory).  Structured JSON logs
go to stderr; command output goes to stdout.

Usage:
    python -m scripts.cli import-inventory equipos.csv
    python -m scripts.cli import-clients clientes.csv --probe-only
    python -m scripts.cli items
    python -m scripts.cli assign ITEM_ID --client CL-001 --receiver Ana --supervisor Luis
    python -m scripts.cli history CL-001
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from fieldops_config import get_active_config
from fieldops_engines.history import history_table
from fieldops_engines.lifecycle import Assign, Release, Retire, SendToMaintenance
from fieldops_ingestion.adapters.csv_adapter import CsvTextAdapter
from fieldops_kernel.db.engine import create_tables, get_session_factory, init_engine_from_url
from fieldops_kernel.db.store import SqlAlchemyStore
from fieldops_kernel.domain.clock import SystemClock
from fieldops_kernel.domain.identity import SystemRandomSource, UuidIdAllocator
from fieldops_kernel.exceptions import FieldOpsError
from fieldops_kernel.logging_config import configure_logging, get_logger
from fieldops_services import ClientService, InventoryService
from scripts.cli.util import print_table

DEFAULT_DB_URL = "sqlite:///fieldops.db"
DB_URL_ENV_VAR = "FIELDOPS_DB_URL"

logger = get_logger("cli")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="fieldops",
        description="Field-service equipment ledger.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--db", default=None, help=f"Database URL (default: ${DB_URL_ENV_VAR} or {DEFAULT_DB_URL}).")
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration override file.")
    parser.add_argument("--verbose", action="store_true", help="Log at DEBUG level.")
    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("import-inventory", "Bulk-load equipment from a CSV file."),
        ("import-clients", "Bulk-upsert clients from a CSV file."),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("file", type=Path)
        cmd.add_argument(
            "--probe-only",
            action="store_true",
            help="Show row count, columns and delimiter, then exit. No writes.",
        )

    sub.add_parser("items", help="List inventory items.")
    sub.add_parser("clients", help="List clients.")

    history = sub.add_parser("history", help="Equipment history for a client.")
    history.add_argument("client_id")

    timeline = sub.add_parser("timeline", help="Status timeline of one item.")
    timeline.add_argument("item_id")

    assign = sub.add_parser("assign", help="Assign an item to a client.")
    assign.add_argument("item_id")
    assign.add_argument("--client", required=True, help="Client id.")
    assign.add_argument("--receiver", required=True, help="Receiving party name.")
    assign.add_argument("--supervisor", required=True, help="Issuing supervisor name.")
    assign.add_argument("--observations", default=None)

    maintenance = sub.add_parser("maintenance", help="Send an item to a workshop.")
    maintenance.add_argument("item_id")
    maintenance.add_argument("--workshop", required=True)
    maintenance.add_argument("--receiver", required=True)
    maintenance.add_argument("--reason", required=True)
    maintenance.add_argument("--observations", default=None)

    release = sub.add_parser("release", help="Return an item to the available pool.")
    release.add_argument("item_id")

    retire = sub.add_parser("retire", help="Retire an item (administrators only).")
    retire.add_argument("item_id")
    retire.add_argument("--privileged", action="store_true", help="Actor holds administrative privilege.")

    for cmd in (assign, maintenance, release, retire):
        cmd.add_argument("--actor", default=None, help="Name recorded in the status log.")

    return parser.parse_args(argv)


def _probe(path: Path) -> int:
    probe = CsvTextAdapter().probe(path)
    print(f"Rows: {probe.row_count}")
    print(f"Delimiter: {probe.detected_delimiter!r}")
    print(f"Columns: {', '.join(probe.columns)}")
    return 0


def _run(args: argparse.Namespace) -> int:
    config = get_active_config(args.config)
    db_url = args.db or os.environ.get(DB_URL_ENV_VAR, DEFAULT_DB_URL)
    engine = init_engine_from_url(db_url)
    create_tables(engine)

    clock = SystemClock()
    store = SqlAlchemyStore(get_session_factory(), clock)
    clients = ClientService(store, SystemRandomSource(), config)
    inventory = InventoryService(store, clock, UuidIdAllocator(), config)
    actor = getattr(args, "actor", None) or config.texts.default_actor

    if args.command in ("import-inventory", "import-clients"):
        if args.probe_only:
            return _probe(args.file)
        service = inventory if args.command == "import-inventory" else clients
        result = service.import_csv(args.file)
        for key, value in result.summary().items():
            print(f"{key}: {value}")
        return 0

    if args.command == "items":
        print_table(
            ("Id", "Name", "Serial", "Status", "Assigned to"),
            [
                (
                    item.id,
                    item.name,
                    item.serial_number,
                    item.status.value,
                    item.open_record.subject_label if item.open_record else "-",
                )
                for item in inventory.list_items()
            ],
        )
        return 0

    if args.command == "clients":
        print_table(
            ("Id", "Name", "Tax id", "Email", "Status"),
            [(c.id, c.name, c.tax_id, c.email, c.status.value) for c in clients.list_clients()],
        )
        return 0

    if args.command == "history":
        header, *rows = history_table(inventory.history_for_client(args.client_id, clients))
        print_table(header, rows)
        return 0

    if args.command == "timeline":
        print_table(
            ("When", "Status", "Actor", "Detail"),
            [
                (row.timestamp, row.status.value, row.actor, row.detail)
                for row in inventory.timeline(args.item_id)
            ],
        )
        return 0

    is_privileged = False
    if args.command == "assign":
        client = clients.get_client(args.client)
        action = Assign(
            subject_id=client.id,
            subject_label=client.name,
            receiving_party_name=args.receiver,
            issuing_supervisor_name=args.supervisor,
            observations=args.observations,
        )
    elif args.command == "maintenance":
        action = SendToMaintenance(
            workshop_name=args.workshop,
            receiver_name=args.receiver,
            reason=args.reason,
            observations=args.observations,
        )
    elif args.command == "release":
        action = Release()
    else:
        action = Retire()
        is_privileged = args.privileged

    result = inventory.apply(args.item_id, action, actor, is_privileged=is_privileged)
    if result.error is not None:
        print(f"Rejected [{result.error.code}]: {result.error}", file=sys.stderr)
        return 2
    print(f"{result.item.id}: {result.item.status.value}")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    configure_logging(level=logging.DEBUG if args.verbose else logging.INFO, stream=sys.stderr)
    logger.info("cli_command_started", extra={"command": args.command})
    try:
        return _run(args)
    except FieldOpsError as exc:
        logger.error("cli_command_failed", extra={"command": args.command, "error_code": exc.code})
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
