"""End-to-end tests for DataComplianceService over the subscriptions store."""

import json

import pytest
from sqlalchemy import select

from datacompliance.core.context import VIEW_TRAIL_CAPABILITY, Actor
from datacompliance.core.exceptions import ConcurrentOperationConflict, ErasureVetoed
from datacompliance.db.models.audit import AuditEntryRecord
from datacompliance.erasure import ErasureStatus
from datacompliance.types import RequestType

pytestmark = pytest.mark.integration

AUDITOR = Actor(actor_id="auditor-1", capabilities=frozenset({VIEW_TRAIL_CAPABILITY}))


class TestQueryHolds:
    """Tests for query_holds."""

    async def test_no_recent_settlement(self, service, seeded_user):
        verdict = await service.query_holds(seeded_user.user_id)

        assert verdict.vetoed is False

    async def test_recent_settlement(self, service, seed):
        user = await seed(user_id=7, settled_age_days=10)

        verdict = await service.query_holds(user.user_id)

        assert verdict.vetoed is True
        assert verdict.source == "recent_settlement:subscriptions"
        assert verdict.reason == (
            "The user has 1 settled subscription(s) created within the last 90 days"
        )

    async def test_read_only(self, service, seed, session_factory):
        """Test that querying holds writes nothing."""
        user = await seed(user_id=7, settled_age_days=10)

        await service.query_holds(user.user_id)

        async with session_factory() as session:
            assert (await session.scalars(select(AuditEntryRecord))).all() == []


class TestRequestErasure:
    """Tests for request_erasure."""

    async def test_erasure_is_audited(self, service, seeded_user):
        """Test that a completed erasure leaves exactly one audit entry."""
        actor = Actor(actor_id="admin-1")

        outcome = await service.request_erasure(seeded_user.user_id, "admin", actor=actor)

        assert outcome.status == ErasureStatus.COMPLETED
        entries = await service.audit_trail.list_entries(AUDITOR, subject_id=seeded_user.user_id)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.actor_id == "admin-1"
        assert entry.request_type == RequestType.ADMIN
        assert entry.outcome == outcome.summary()
        assert entry.domain_status == {"subscriptions": "completed"}

    async def test_audit_entries_carry_no_personal_data(
        self, service, seeded_user, session_factory, pii
    ):
        """Test that no seeded personal value reaches the stored audit row."""
        await service.request_erasure(seeded_user.user_id, RequestType.USER)

        async with session_factory() as session:
            rows = (await session.scalars(select(AuditEntryRecord))).all()

        assert len(rows) == 1
        stored = json.dumps(
            {
                "actor_id": rows[0].actor_id,
                "outcome": rows[0].outcome,
                "domain_status": rows[0].domain_status,
            }
        )
        for value in pii.values():
            assert value not in stored

    async def test_lifecycle_erasure_uses_system_actor(self, service, seeded_user):
        await service.request_erasure(seeded_user.user_id, RequestType.LIFECYCLE)

        (entry,) = await service.audit_trail.list_entries(AUDITOR)
        assert entry.actor_id == "system"
        assert entry.request_type == RequestType.LIFECYCLE

    async def test_veto_leaves_no_trace(self, service, seed, session_factory):
        """Test that a vetoed erasure changes nothing and is not audited."""
        user = await seed(user_id=7, settled_age_days=10)

        with pytest.raises(ErasureVetoed):
            await service.request_erasure(user.user_id, RequestType.USER)

        async with session_factory() as session:
            assert (await session.scalars(select(AuditEntryRecord))).all() == []
        tree = await service.request_export(user.user_id)
        assert len(tree.section("subscriptions").items) == 2

    async def test_second_erasure_finds_nothing_to_delete(self, service, seeded_user):
        """Test that a second erasure finds no records left for the user."""
        await service.request_erasure(seeded_user.user_id, RequestType.USER)

        outcome = await service.request_erasure(seeded_user.user_id, RequestType.USER)

        assert outcome.is_complete
        assert outcome.summary() == {"subscriptions": {}}

    async def test_export_rejected_during_erasure(self, service, seeded_user):
        """Test that an export for a user under erasure is refused."""
        async with service.locks.exclusive(seeded_user.user_id, "erasure"):
            with pytest.raises(ConcurrentOperationConflict):
                await service.request_export(seeded_user.user_id)


class TestRequestExport:
    """Tests for request_export."""

    async def test_export_tree(self, service, seeded_user, pii):
        tree = await service.request_export(seeded_user.user_id)

        assert tree.user_id == seeded_user.user_id
        assert [s.name for s in tree.sections] == [
            "subscriptions",
            "invoices",
            "creditnotes",
            "users",
        ]
        assert tree.warnings == []
        assert tree.section("users").items[0].fields["city"] == pii["city"]

    async def test_export_after_erasure(self, service, seeded_user, pii):
        """Test that nothing is exported for the user after erasure."""
        await service.request_erasure(seeded_user.user_id, RequestType.USER)

        tree = await service.request_export(seeded_user.user_id)

        assert all(section.items == [] for section in tree.sections)
        exported = json.dumps([s.model_dump() for s in tree.sections])
        for key in ("name", "address", "city", "zip", "ip", "ua", "business", "vat", "note"):
            assert pii[key] not in exported
