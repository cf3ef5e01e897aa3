"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .aggregate import group_by_room
from .config import load_config
from .db import AuditDB, PropertyDB, ScanDB
from .inspector import InventoryInspector
from .models import InventoryItem
from .reconcile import (
    add_item,
    adjust_count,
    adjust_found,
    remove_item,
    rename_item,
    set_item,
    summarize,
    total_count,
)
from .report import ReportDocument, report_filename
from .vision import create_backend


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="roomaudit",
        description="Photograph rooms, record their inventory, and audit it later",
    )
    parser.add_argument(
        "--config", "-c", type=str, default=None, help="Path to a TOML config file"
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging"
    )

    sub = parser.add_subparsers(dest="command")

    # property
    prop_parser = sub.add_parser("property", help="Manage properties")
    prop_sub = prop_parser.add_subparsers(dest="property_command")
    prop_add = prop_sub.add_parser("add", help="Add a property")
    prop_add.add_argument("name")
    prop_add.add_argument("--address", default="")
    prop_sub.add_parser("list", help="List properties")
    prop_edit = prop_sub.add_parser("edit", help="Change a property's name or address")
    prop_edit.add_argument("property_id", type=int)
    prop_edit.add_argument("--name", default=None)
    prop_edit.add_argument("--address", default=None)

    # scan
    scan_parser = sub.add_parser("scan", help="Analyze a room photo and save the scan")
    scan_parser.add_argument("image", help="Photo of the room")
    scan_parser.add_argument("--room", default="", help="Room name")
    scan_parser.add_argument("--location", default="", help="Location within the room")
    scan_parser.add_argument("--property", type=int, default=None, dest="property_id")
    scan_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # rooms
    rooms_parser = sub.add_parser("rooms", help="List scans grouped by room")
    rooms_parser.add_argument("--property", type=int, default=None, dest="property_id")
    rooms_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # edit
    edit_parser = sub.add_parser("edit", help="Correct a saved scan")
    edit_parser.add_argument("scan_id", type=int)
    edit_parser.add_argument("--room", default=None)
    edit_parser.add_argument("--location", default=None)
    edit_parser.add_argument(
        "--set", action="append", default=[], dest="set_items",
        metavar="NAME=COUNT[:CONDITION]",
        help="Set an item's count (adds the item if it is not present)",
    )
    edit_parser.add_argument(
        "--remove", action="append", default=[], dest="remove_items",
        metavar="NAME", help="Remove the first item with this name",
    )
    edit_parser.add_argument(
        "--rename", action="append", default=[], dest="renames",
        metavar="INDEX=NAME", help="Rename the item row at INDEX (see `show`)",
    )
    edit_parser.add_argument(
        "--adjust", action="append", default=[], dest="adjust_items",
        metavar="INDEX:DELTA", help="Change the count of the item row at INDEX",
    )

    # show
    show_parser = sub.add_parser("show", help="Show a scan's item rows")
    show_parser.add_argument("scan_id", type=int)

    # delete
    delete_parser = sub.add_parser("delete", help="Delete a scan, or every scan of a property")
    delete_parser.add_argument("scan_id", type=int, nargs="?", default=None)
    delete_parser.add_argument("--property", type=int, default=None, dest="property_id")

    # audit
    audit_parser = sub.add_parser("audit", help="Run audit sessions")
    audit_sub = audit_parser.add_subparsers(dest="audit_command")
    audit_start = audit_sub.add_parser("start", help="Start an audit session")
    audit_start.add_argument("property_id", type=int)
    audit_start.add_argument("name")
    audit_check = audit_sub.add_parser("check", help="Verify a scan against a new photo")
    audit_check.add_argument("session_id", type=int)
    audit_check.add_argument("scan_id", type=int)
    audit_check.add_argument("image")
    audit_check.add_argument(
        "--adjust", action="append", default=[], metavar="INDEX:DELTA",
        help="Correct a found count before saving",
    )
    audit_check.add_argument("--json", action="store_true", help="Output as JSON")
    audit_finish = audit_sub.add_parser("finish", help="Mark a session completed")
    audit_finish.add_argument("session_id", type=int)
    audit_list = audit_sub.add_parser("list", help="List audit sessions")
    audit_list.add_argument("--property", type=int, default=None, dest="property_id")
    audit_list.add_argument(
        "--completed", action="store_true", help="Only completed sessions"
    )

    # report
    report_parser = sub.add_parser("report", help="Inventory report grouped by room")
    report_parser.add_argument("--property", type=int, default=None, dest="property_id")
    report_parser.add_argument(
        "--pdf", nargs="?", const="", default=None, metavar="FILE",
        help="Write a PDF (default name in the configured output directory)",
    )
    report_parser.add_argument("--json", action="store_true", help="Output as JSON")

    # audit-report
    areport_parser = sub.add_parser("audit-report", help="Report for a completed audit")
    areport_parser.add_argument("session_id", type=int)
    areport_parser.add_argument(
        "--pdf", nargs="?", const="", default=None, metavar="FILE",
        help="Write a PDF (default name in the configured output directory)",
    )
    areport_parser.add_argument("--json", action="store_true", help="Output as JSON")

    return parser


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    db_path = config.database.path

    properties = PropertyDB(db_path)
    scans = ScanDB(db_path)
    audits = AuditDB(db_path)
    try:
        match args.command:
            case "property":
                _cmd_property(properties, args)
            case "scan":
                asyncio.run(_cmd_scan(config, scans, audits, properties, args))
            case "rooms":
                _cmd_rooms(scans, args)
            case "edit":
                _cmd_edit(scans, args)
            case "show":
                _cmd_show(scans, args)
            case "delete":
                _cmd_delete(scans, args)
            case "audit":
                _cmd_audit(config, scans, audits, properties, args)
            case "report":
                _cmd_report(config, scans, audits, properties, args)
            case "audit-report":
                _cmd_audit_report(config, scans, audits, properties, args)
    except (ValueError, ImportError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        properties.close()
        scans.close()
        audits.close()


def _inspector(config, scans, audits, properties, *, with_backend: bool):
    backend = create_backend(config) if with_backend else None
    return InventoryInspector(scans, audits, properties, backend)


def _cmd_property(properties: PropertyDB, args) -> None:
    match args.property_command:
        case "add":
            property_id = properties.add_property(args.name, args.address)
            print(f"Added property {property_id}: {args.name}")
        case "list":
            rows = properties.list_properties()
            if not rows:
                print("No properties yet.")
                return
            for p in rows:
                address = f"  ({p.address})" if p.address else ""
                print(f"  [{p.id}] {p.name}{address}")
        case "edit":
            current = properties.get_property(args.property_id)
            if current is None:
                raise ValueError(f"Property not found: {args.property_id}")
            name = current.name if args.name is None else args.name
            address = current.address if args.address is None else args.address
            properties.update_property(args.property_id, name, address)
            print(f"Updated property {args.property_id}: {name.strip()}")
        case _:
            raise ValueError("property requires a subcommand: add, list or edit")


async def _cmd_scan(config, scans, audits, properties, args) -> None:
    inspector = _inspector(config, scans, audits, properties, with_backend=True)
    print("🔍 Analyzing photo...", file=sys.stderr if args.json else sys.stdout)
    snapshot = await inspector.scan_room(
        args.property_id, args.image, args.room, args.location
    )

    if args.json:
        print(json.dumps(
            {
                "id": snapshot.id,
                "room_name": snapshot.room_name,
                "status": snapshot.status,
                "analysis": snapshot.analysis.to_dict(),
            },
            ensure_ascii=False,
            indent=2,
        ))
        return

    print(f"Saved scan {snapshot.id} in {snapshot.room_name} [{snapshot.status}]")
    if not snapshot.items:
        print("No items were detected.")
        return
    print(f"Found {total_count(snapshot.items)} item(s):")
    for item in snapshot.items:
        print(f"  {item.name:<24} x{item.count:<4} {item.condition}")


def _cmd_rooms(scans: ScanDB, args) -> None:
    sections = group_by_room(scans.list_scans(args.property_id))

    if args.json:
        data = [
            {
                "title": s.title,
                "scans": [
                    {
                        "id": snap.id,
                        "created_at": snap.created_at,
                        "status": snap.status,
                        "location": snap.location,
                        "total_items": total_count(snap.items),
                    }
                    for snap in s.data
                ],
            }
            for s in sections
        ]
        print(json.dumps(data, ensure_ascii=False, indent=2))
        return

    if not sections:
        print("No scans yet.")
        return
    for section in sections:
        print(f"{section.title}")
        for snap in section.data:
            label = snap.location or snap.room_name
            print(
                f"  [{snap.id}] {label:<20} {total_count(snap.items):>4} item(s)"
                f"  {snap.status}  {snap.created_at}"
            )


def _parse_set(text: str) -> InventoryItem:
    name, sep, rest = text.partition("=")
    if not sep or not name.strip():
        raise ValueError(f"Expected NAME=COUNT[:CONDITION], got {text!r}")
    count_text, _, condition = rest.partition(":")
    try:
        count = int(count_text)
    except ValueError:
        raise ValueError(f"Count must be an integer in {text!r}") from None
    return InventoryItem(name=name.strip(), count=max(0, count), condition=condition.strip())


def _cmd_edit(scans: ScanDB, args) -> None:
    snapshot = scans.get_scan(args.scan_id)
    if snapshot is None:
        raise ValueError(f"Scan not found: {args.scan_id}")

    items = list(snapshot.items)
    for text in args.set_items:
        update = _parse_set(text)
        index = next((i for i, it in enumerate(items) if it.name == update.name), None)
        if index is None:
            items = add_item(items, update)
        else:
            if not update.condition:
                update = InventoryItem(update.name, update.count, items[index].condition)
            items = set_item(items, index, update)
    for text in args.renames:
        index, name = _parse_rename(text)
        items = rename_item(items, index, name)
    for text in args.adjust_items:
        index, delta = _parse_adjust(text)
        items = adjust_count(items, index, delta)
    for name in args.remove_items:
        index = next((i for i, it in enumerate(items) if it.name == name), -1)
        items = remove_item(items, index)

    room = snapshot.room_name if args.room is None else args.room
    location = snapshot.location if args.location is None else args.location
    scans.update_scan(args.scan_id, room_name=room, items=items, location=location)
    print(f"Updated scan {args.scan_id}: {len(items)} item row(s)")


def _parse_rename(text: str) -> tuple[int, str]:
    index_text, sep, name = text.partition("=")
    try:
        if not sep:
            raise ValueError
        return int(index_text), name.strip()
    except ValueError:
        raise ValueError(f"Expected INDEX=NAME, got {text!r}") from None


def _cmd_show(scans: ScanDB, args) -> None:
    snapshot = scans.get_scan(args.scan_id)
    if snapshot is None:
        raise ValueError(f"Scan not found: {args.scan_id}")

    location = f" / {snapshot.location}" if snapshot.location else ""
    print(f"Scan {snapshot.id}: {snapshot.room_name}{location} [{snapshot.status}]")
    if not snapshot.items:
        print("No items recorded for this scan.")
        return
    for i, item in enumerate(snapshot.items):
        print(f"  {i:>2} {item.name:<24} x{item.count:<4} {item.condition}")


def _cmd_delete(scans: ScanDB, args) -> None:
    if args.property_id is not None:
        deleted = scans.delete_property_scans(args.property_id)
        print(f"Deleted {deleted} scan(s) of property {args.property_id}")
    elif args.scan_id is not None:
        scans.delete_scan(args.scan_id)
        print(f"Deleted scan {args.scan_id}")
    else:
        raise ValueError("delete requires a SCAN_ID or --property")


def _parse_adjust(text: str) -> tuple[int, int]:
    index_text, sep, delta_text = text.partition(":")
    try:
        if not sep:
            raise ValueError
        return int(index_text), int(delta_text)
    except ValueError:
        raise ValueError(f"Expected INDEX:DELTA, got {text!r}") from None


def _cmd_audit(config, scans, audits, properties, args) -> None:
    match args.audit_command:
        case "start":
            inspector = _inspector(config, scans, audits, properties, with_backend=False)
            session_id = inspector.start_audit(args.property_id, args.name)
            print(f"Started audit session {session_id}")
        case "check":
            asyncio.run(_cmd_audit_check(config, scans, audits, properties, args))
        case "finish":
            inspector = _inspector(config, scans, audits, properties, with_backend=False)
            inspector.finish_audit(args.session_id)
            print(f"Completed audit session {args.session_id}")
        case "list":
            sessions = audits.list_sessions(
                args.property_id, completed_only=args.completed
            )
            if not sessions:
                print("No audit sessions.")
                return
            for s in sessions:
                print(f"  [{s.id}] {s.name:<24} {s.status:<12} {s.created_at}")
        case _:
            raise ValueError("audit requires a subcommand: start, check, finish or list")


async def _cmd_audit_check(config, scans, audits, properties, args) -> None:
    inspector = _inspector(config, scans, audits, properties, with_backend=True)
    print("🔍 Verifying items...", file=sys.stderr if args.json else sys.stdout)
    outcomes = await inspector.verify_scan(args.scan_id, args.image)
    for text in args.adjust:
        index, delta = _parse_adjust(text)
        outcomes = adjust_found(outcomes, index, delta)
    inspector.record_audit(args.session_id, args.scan_id, args.image, outcomes)

    if args.json:
        print(json.dumps([o.to_dict() for o in outcomes], ensure_ascii=False, indent=2))
        return

    for i, o in enumerate(outcomes):
        mark = "✓" if o.status.value == "Match" else "!"
        print(
            f"  {i:>2} {mark} {o.item:<24} expected {o.expected_count:<4}"
            f" found {o.found_count:<4} {o.status.value}"
        )
    summary = summarize(outcomes)
    print(", ".join(f"{k}: {v}" for k, v in summary.items()))


def _print_document(document: ReportDocument) -> None:
    print(document.title)
    if document.subtitle:
        print(document.subtitle)
    print(f"Generated on: {document.generated_at}")
    for room in document.rooms:
        print()
        print(f"== {room.title}")
        for scan in room.scans:
            date = f" ({scan.date})" if scan.date else ""
            print(f"  -- {scan.heading}{date}")
            if not scan.rows:
                print("     No items recorded for this scan.")
            for row in scan.rows:
                print("     " + " | ".join(row.cells()))


def _emit(config, document: ReportDocument, args, prefix: str) -> None:
    if args.json:
        print(json.dumps(document.to_dict(), ensure_ascii=False, indent=2))
    elif args.pdf is None:
        _print_document(document)

    if args.pdf is not None:
        from .pdf import generate_pdf

        if args.pdf:
            pdf_path = Path(args.pdf)
        else:
            pdf_path = Path(config.report.output_dir).expanduser() / report_filename(prefix)
        generate_pdf(document, pdf_path)
        print(f"📄 PDF saved: {pdf_path}", file=sys.stderr if args.json else sys.stdout)


def _cmd_report(config, scans, audits, properties, args) -> None:
    inspector = _inspector(config, scans, audits, properties, with_backend=False)
    document = inspector.inventory_report(args.property_id, title=config.report.title)
    _emit(config, document, args, "Inventory_Report")


def _cmd_audit_report(config, scans, audits, properties, args) -> None:
    inspector = _inspector(config, scans, audits, properties, with_backend=False)
    document = inspector.audit_report(args.session_id)
    _emit(config, document, args, "Audit_Report")
