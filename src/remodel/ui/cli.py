from __future__ import annotations

import argparse
import json
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from remodel.adapters.http_transport import HttpTransport
from remodel.app import (
    create_record,
    delete_records,
    list_records,
    record_type_for,
    show_record,
    update_record,
)
from remodel.common.logging import configure_logging

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from types import FrameType

    from remodel.domain.ports.transport import Transport

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Work with records of a remote JSON API")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--primary-key",
        default="id",
        help="Name of the key attribute (default: %(default)s)",
    )
    parser.add_argument(
        "--data-field",
        default="data",
        help="Response field the resource is nested under; empty for none (default: %(default)s)",
    )
    parser.add_argument(
        "--update-method",
        choices=("patch", "put"),
        default="patch",
        help="HTTP method used for updates (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    show = subparsers.add_parser("show", help="Fetch one record")
    show.add_argument("endpoint", help="Collection path, e.g. users")
    show.add_argument("key", help="Key of the record")

    listing = subparsers.add_parser("list", help="Fetch a collection")
    listing.add_argument("endpoint", help="Collection path, e.g. users")
    listing.add_argument(
        "params",
        nargs="*",
        metavar="name=value",
        help="Query parameters",
    )

    create = subparsers.add_parser("create", help="Create a record")
    create.add_argument("endpoint", help="Collection path, e.g. users")
    create.add_argument("fields", nargs="+", metavar="name=value", help="Attributes to send")

    update = subparsers.add_parser("update", help="Update a record")
    update.add_argument("endpoint", help="Collection path, e.g. users")
    update.add_argument("key", help="Key of the record")
    update.add_argument("fields", nargs="+", metavar="name=value", help="Attributes to change")

    delete = subparsers.add_parser("delete", help="Delete records")
    delete.add_argument("endpoint", help="Collection path, e.g. users")
    delete.add_argument("keys", nargs="+", help="Keys of the records to delete")

    return parser.parse_args(list(argv))


def _parse_assignments(pairs: Sequence[str]) -> dict[str, object]:
    """Parse ``name=value`` pairs; values are read as JSON when they parse, else as text."""
    values: dict[str, object] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise ValueError(f"Expected name=value, got {pair!r}")
        try:
            values[name] = json.loads(raw)
        except json.JSONDecodeError:
            values[name] = raw
    return values


def _emit(payload: object) -> None:
    sys.stdout.write(json.dumps(payload, indent=2, default=str) + "\n")


def main(
    argv: Sequence[str] | None = None,
    *,
    transport_factory: Callable[[], Transport] | None = None,
) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        fields = _parse_assignments(getattr(parsed_args, "fields", None) or [])
        params = _parse_assignments(getattr(parsed_args, "params", None) or [])
    except ValueError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(2)

    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    record_type = record_type_for(
        parsed_args.endpoint,
        primary_key=parsed_args.primary_key,
        data_field=parsed_args.data_field,
        update_method=parsed_args.update_method,
    )

    try:
        transport = transport_factory() if transport_factory is not None else HttpTransport()
        if parsed_args.command == "show":
            _emit(show_record(transport, record_type, parsed_args.key).to_dict())
        elif parsed_args.command == "list":
            records = list_records(transport, record_type, params)
            _emit([record.to_dict() for record in records])
        elif parsed_args.command == "create":
            _emit(create_record(transport, record_type, fields).to_dict())
        elif parsed_args.command == "update":
            _emit(update_record(transport, record_type, parsed_args.key, fields).to_dict())
        elif parsed_args.command == "delete":
            deleted = delete_records(transport, record_type, parsed_args.keys)
            _emit({"deleted": deleted})
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception as exc:  # noqa: BLE001
        log.debug("Command failed", exc_info=True)
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
