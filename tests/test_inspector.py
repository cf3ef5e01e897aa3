"""Tests for InventoryInspector workflows (vision backend faked)."""

import sys
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, PropertyMock, patch

import pytest

from conftest import FakeBackend

from roomaudit.db import AuditDB, PropertyDB, ScanDB
from roomaudit.inspector import InventoryInspector
from roomaudit.models import AuditStatus, InventoryItem
from roomaudit.vision.gemini import GeminiVisionBackend

CHAIR = InventoryItem("Chair", 4, "Good")
LAMP = InventoryItem("Lamp", 2, "Fair")


@pytest.fixture
def stores(tmp_path):
    path = tmp_path / "test.db"
    scans, audits, properties = ScanDB(path), AuditDB(path), PropertyDB(path)
    yield scans, audits, properties
    scans.close()
    audits.close()
    properties.close()


@pytest.fixture
def backend():
    return FakeBackend(
        items_by_image={
            "living.jpg": [CHAIR, LAMP],
            "living-audit.jpg": [InventoryItem("Chair", 4, "Good"), InventoryItem("Lamp", 1, "Fair")],
            "bed.jpg": [InventoryItem("Bed", 1, "Good")],
        }
    )


@pytest.fixture
def inspector(stores, backend):
    scans, audits, properties = stores
    return InventoryInspector(scans, audits, properties, backend)


@pytest.fixture
def property_id(stores):
    return stores[2].add_property("12 Elm St")


class TestScanRoom:
    @pytest.mark.asyncio
    async def test_saves_detected_items(self, inspector, backend, property_id):
        snapshot = await inspector.scan_room(property_id, "living.jpg", " Living ", "Bay")

        assert backend.calls == ["living.jpg"]
        assert snapshot.room_name == "Living"
        assert snapshot.status == "complete"
        assert snapshot.items == [CHAIR, LAMP]
        assert snapshot.location == "Bay"

    @pytest.mark.asyncio
    async def test_analysis_failure_still_saves(self, stores, property_id, caplog):
        scans, audits, properties = stores
        inspector = InventoryInspector(
            scans, audits, properties, FakeBackend(error=RuntimeError("quota exceeded"))
        )

        snapshot = await inspector.scan_room(property_id, "x.jpg", "Hall")

        assert snapshot.status == "uploaded"
        assert snapshot.items == []
        assert "Analysis failed" in caplog.text

    @pytest.mark.asyncio
    async def test_blocked_gemini_reply_still_saves(self, stores, tmp_path):
        scans, audits, properties = stores
        img = tmp_path / "den.jpg"
        img.write_bytes(b"jpeg")

        mock_response = MagicMock()
        type(mock_response).text = PropertyMock(
            side_effect=ValueError("response.text quick accessor: reply was blocked")
        )
        mock_model = MagicMock()
        mock_model.generate_content_async = AsyncMock(return_value=mock_response)
        mock_genai = MagicMock()
        mock_genai.GenerativeModel.return_value = mock_model
        mock_google = MagicMock()
        mock_google.generativeai = mock_genai

        inspector = InventoryInspector(
            scans, audits, properties, GeminiVisionBackend(api_key="test-key")
        )
        with patch.dict(
            sys.modules,
            {"google": mock_google, "google.generativeai": mock_genai},
        ):
            snapshot = await inspector.scan_room(None, str(img), "Den")

        assert snapshot.room_name == "Den"
        assert snapshot.status == "uploaded"
        assert snapshot.items == []
        assert len(scans.list_scans()) == 1

    @pytest.mark.asyncio
    async def test_missing_key_is_raised(self, stores, property_id):
        scans, audits, properties = stores
        inspector = InventoryInspector(
            scans, audits, properties, FakeBackend(error=ValueError("API key is not set"))
        )
        with pytest.raises(ValueError, match="API key"):
            await inspector.scan_room(property_id, "x.jpg", "Hall")
        assert scans.list_scans() == []

    @pytest.mark.asyncio
    async def test_requires_backend(self, stores, property_id):
        scans, audits, properties = stores
        inspector = InventoryInspector(scans, audits, properties)
        with pytest.raises(ValueError, match="No vision backend"):
            await inspector.scan_room(property_id, "x.jpg", "Hall")


class TestAudit:
    @pytest.mark.asyncio
    async def test_full_audit_flow(self, inspector, property_id):
        living = await inspector.scan_room(property_id, "living.jpg", "Living", "Bay")
        bed = await inspector.scan_room(property_id, "bed.jpg", "Bedroom")

        session_id = inspector.start_audit(property_id, "Move-out")
        outcomes = await inspector.audit_scan(session_id, living.id, "living-audit.jpg")
        assert [o.status for o in outcomes] == [AuditStatus.MATCH, AuditStatus.MISMATCH]
        await inspector.audit_scan(session_id, bed.id, "empty.jpg")

        inspector.finish_audit(session_id)
        doc = inspector.audit_report(session_id, now=datetime(2025, 5, 1, 8, 0))

        assert doc.subtitle == "12 Elm St - Move-out"
        assert [r.title for r in doc.rooms] == ["Living", "Bedroom"]
        assert doc.rooms[0].scans[0].heading == "Bay"
        assert doc.rooms[0].scans[0].original_image_ref == "living.jpg"
        assert doc.rooms[1].scans[0].rows[0].cells() == ["Bed", "1", "0", "Missing"]

    @pytest.mark.asyncio
    async def test_verify_then_correct_then_record(self, inspector, stores, property_id):
        from roomaudit.reconcile import adjust_found

        living = await inspector.scan_room(property_id, "living.jpg", "Living")
        session_id = inspector.start_audit(property_id, "Check")

        outcomes = await inspector.verify_scan(living.id, "living-audit.jpg")
        assert stores[1].get_records(session_id) == []

        corrected = adjust_found(outcomes, 1, 1)
        inspector.record_audit(session_id, living.id, "living-audit.jpg", corrected)

        saved = stores[1].get_records(session_id)[0].comparison
        assert saved[1].found_count == 2
        assert saved[1].status == AuditStatus.MATCH

    @pytest.mark.asyncio
    async def test_verify_unknown_scan(self, inspector):
        with pytest.raises(ValueError, match="Scan not found"):
            await inspector.verify_scan(404, "a.jpg")

    @pytest.mark.asyncio
    async def test_audit_unknown_session(self, inspector):
        with pytest.raises(ValueError, match="session not found"):
            await inspector.audit_scan(404, 1, "a.jpg")

    def test_record_unknown_session(self, inspector):
        with pytest.raises(ValueError, match="session not found"):
            inspector.record_audit(404, 1, "a.jpg", [])

    def test_finish_unknown_session(self, inspector):
        with pytest.raises(ValueError, match="session not found"):
            inspector.finish_audit(404)

    def test_report_requires_completed_session(self, inspector, property_id):
        session_id = inspector.start_audit(property_id, "Open")
        with pytest.raises(ValueError, match="only completed sessions"):
            inspector.audit_report(session_id)

    def test_report_unknown_session(self, inspector):
        with pytest.raises(ValueError, match="session not found"):
            inspector.audit_report(404)

    @pytest.mark.asyncio
    async def test_deleted_scan_reported_as_unknown_room(self, inspector, stores, property_id):
        living = await inspector.scan_room(property_id, "living.jpg", "Living")
        session_id = inspector.start_audit(property_id, "Check")
        await inspector.audit_scan(session_id, living.id, "living-audit.jpg")
        stores[0].delete_scan(living.id)
        inspector.finish_audit(session_id)

        doc = inspector.audit_report(session_id)
        assert doc.rooms[0].title == "Unknown Room"
        assert doc.rooms[0].scans[0].heading == "Scan"


class TestInventoryReport:
    @pytest.mark.asyncio
    async def test_grouped_by_room(self, inspector, property_id):
        await inspector.scan_room(property_id, "living.jpg", "Living")
        await inspector.scan_room(property_id, "bed.jpg", "Bedroom")
        await inspector.scan_room(property_id, "nothing.jpg", "")

        doc = inspector.inventory_report(property_id, now=datetime(2025, 5, 1, 8, 0))

        assert doc.title == "Property Inventory Report: 12 Elm St"
        assert [r.title for r in doc.rooms] == ["Bedroom", "Living", "Unassigned"]
        assert doc.rooms[2].scans[0].rows == []

    def test_without_property(self, inspector):
        doc = inspector.inventory_report(None, title="All")
        assert doc.title == "All"
        assert doc.rooms == []
