"""Tests for room and audit grouping."""

from conftest import make_snapshot

from roomaudit.aggregate import (
    build_audit_report,
    completed_sessions,
    group_by_room,
)
from roomaudit.models import (
    AuditOutcome,
    AuditRecord,
    AuditSession,
    AuditStatus,
    InventoryItem,
)


def _session(status="completed"):
    return AuditSession(id=10, property_id=1, name="Spring check", status=status)


def _record(scan_id, image="audit.jpg", outcomes=None):
    return AuditRecord(
        session_id=10,
        original_scan_id=scan_id,
        audit_image_path=image,
        comparison=outcomes or [],
    )


class TestGroupByRoom:
    def test_case_sensitive_sections_sorted(self):
        snaps = [
            make_snapshot(1, "kitchen"),
            make_snapshot(2, "Kitchen"),
            make_snapshot(3, "  Bath "),
        ]
        sections = group_by_room(snaps)
        assert [s.title for s in sections] == ["Bath", "Kitchen", "kitchen"]

    def test_preserves_order_within_room(self):
        snaps = [
            make_snapshot(3, "Hall"),
            make_snapshot(1, "Den"),
            make_snapshot(2, "Hall"),
        ]
        sections = group_by_room(snaps)
        hall = next(s for s in sections if s.title == "Hall")
        assert [s.id for s in hall.data] == [3, 2]

    def test_trims_before_grouping(self):
        sections = group_by_room([make_snapshot(1, "Den "), make_snapshot(2, " Den")])
        assert len(sections) == 1
        assert [s.id for s in sections[0].data] == [1, 2]

    def test_empty_room_is_unassigned(self):
        sections = group_by_room([make_snapshot(1, ""), make_snapshot(2, None)])
        assert [s.title for s in sections] == ["Unassigned"]
        assert len(sections[0].data) == 2

    def test_is_a_partition(self):
        snaps = [make_snapshot(i, room) for i, room in enumerate(
            ["B", "a", "A", "B", "c", "a", ""]
        )]
        sections = group_by_room(snaps)
        ids = [s.id for section in sections for s in section.data]
        assert sorted(ids) == list(range(len(snaps)))
        titles = [s.title for s in sections]
        assert titles == sorted(titles)

    def test_empty_input(self):
        assert group_by_room([]) == []

    def test_deterministic(self):
        snaps = [make_snapshot(i, r) for i, r in enumerate(["Z", "Y", "X"])]
        assert group_by_room(snaps) == group_by_room(snaps)


class TestCompletedSessions:
    def test_filters_in_progress(self):
        sessions = [_session("in_progress"), _session("completed")]
        assert completed_sessions(sessions) == [sessions[1]]


class TestBuildAuditReport:
    def test_groups_in_first_seen_order(self):
        snaps = [
            make_snapshot(1, "Kitchen", image_path="k1.jpg"),
            make_snapshot(2, "Bedroom", image_path="b1.jpg"),
            make_snapshot(3, "Kitchen", image_path="k2.jpg"),
        ]
        records = [_record(1, "a1.jpg"), _record(2, "a2.jpg"), _record(3, "a3.jpg")]
        rooms = build_audit_report(_session(), records, snaps)

        assert [r.room_name for r in rooms] == ["Kitchen", "Bedroom"]
        assert [s.audit_image_ref for s in rooms[0].scans] == ["a1.jpg", "a3.jpg"]
        assert [s.original_image_ref for s in rooms[0].scans] == ["k1.jpg", "k2.jpg"]

    def test_scan_name_from_location(self):
        snaps = [make_snapshot(1, "Living", location="East Wall"), make_snapshot(2, "Living")]
        rooms = build_audit_report(_session(), [_record(1), _record(2)], snaps)
        assert [s.scan_name for s in rooms[0].scans] == ["East Wall", "Scan"]

    def test_unresolved_scan_kept_as_unknown_room(self, caplog):
        rooms = build_audit_report(_session(), [_record(99, "x.jpg")], [make_snapshot(1)])
        assert len(rooms) == 1
        assert rooms[0].room_name == "Unknown Room"
        scan = rooms[0].scans[0]
        assert scan.scan_name == "Scan"
        assert scan.original_image_ref == ""
        assert scan.audit_image_ref == "x.jpg"
        assert "not found" in caplog.text

    def test_preserves_record_count(self):
        snaps = [make_snapshot(1, "A"), make_snapshot(2, "B")]
        records = [_record(1), _record(2), _record(1), _record(7), _record(2)]
        rooms = build_audit_report(_session(), records, snaps)
        assert sum(len(r.scans) for r in rooms) == len(records)

    def test_outcomes_passed_through(self):
        outcomes = [AuditOutcome("Chair", 4, 3, AuditStatus.MISMATCH)]
        snaps = [make_snapshot(1, items=[InventoryItem("Chair", 4, "Good")])]
        rooms = build_audit_report(_session(), [_record(1, outcomes=outcomes)], snaps)
        assert rooms[0].scans[0].outcomes == outcomes

    def test_id_types_compare_as_strings(self):
        rooms = build_audit_report(_session(), [_record("5")], [make_snapshot(5, "Loft")])
        assert rooms[0].room_name == "Loft"

    def test_no_records(self):
        assert build_audit_report(_session(), [], [make_snapshot(1)]) == []
