"""Pytest fixtures for datacompliance tests."""

from collections.abc import AsyncGenerator, AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
import structlog
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from datacompliance.adapters.subscriptions.models import (
    CreditNote,
    Invoice,
    PayState,
    Subscription,
    SubscriptionUser,
)
from datacompliance.config.settings import Settings
from datacompliance.core.context import VIEW_TRAIL_CAPABILITY
from datacompliance.db.config import create_all, create_engine, create_session_factory
from datacompliance.observability.metrics import set_metrics_enabled
from datacompliance.service import DataComplianceService, build_service
from datacompliance.types import (
    DomainRecord,
    ErasureAction,
    ExportItem,
    ExportSection,
)

# =============================================================================
# Structlog Configuration Fixture
# =============================================================================


@pytest.fixture(scope="function", autouse=True)
def reset_structlog_after_test():
    """Reset structlog configuration after each test.

    This ensures tests that modify structlog global state
    don't affect other tests.
    """
    yield
    structlog.reset_defaults()
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )


@pytest.fixture(autouse=True)
def metrics_enabled():
    """Keep metric recording on, whatever a test set it to."""
    set_metrics_enabled(True)
    yield
    set_metrics_enabled(True)


@pytest.fixture
def test_settings() -> Settings:
    """Settings for an isolated in-memory store."""
    return Settings(
        DATABASE_URL="sqlite+aiosqlite:///:memory:",
        ENVIRONMENT="test",
        DEBUG=True,
        log_level="DEBUG",
        settlement_hold_days=90,
        store_timeout_seconds=5.0,
        export_concurrency=2,
    )


# =============================================================================
# Fake domain adapter
# =============================================================================


def make_record(
    kind: str,
    key: int | str,
    domain: str = "shop",
    display_id: str | None = None,
    lifecycle_state: str | None = None,
    settled: bool = False,
    created_at: datetime | None = None,
    **data: Any,
) -> DomainRecord:
    return DomainRecord(
        domain=domain,
        kind=kind,
        key=key,
        display_id=display_id or str(key),
        lifecycle_state=lifecycle_state,
        settled=settled,
        created_at=created_at,
        data=data,
    )


class FakeDomainAdapter:
    """In-memory DomainAdapter recording every call in a shared call log.

    Records are erased as "deleted" under the category "<kind>s".
    """

    def __init__(
        self,
        domain: str,
        records: Sequence[DomainRecord] = (),
        dependents: dict[str, list[DomainRecord]] | None = None,
        calls: list[tuple[str, ...]] | None = None,
        fail_on: str | None = None,
        error: Exception | None = None,
        export_error: Exception | None = None,
    ):
        self._domain = domain
        self.records = list(records)
        self.dependents = dependents or {}
        self.calls = calls if calls is not None else []
        self.fail_on = fail_on
        self.error = error
        self.export_error = export_error
        self.erased: list[str] = []

    @property
    def domain(self) -> str:
        return self._domain

    @property
    def description(self) -> str:
        return f"{self._domain} records"

    async def list_user_records(self, user_id) -> AsyncIterator[DomainRecord]:
        self.calls.append(("list", self._domain))
        for record in self.records:
            yield record

    async def dependents_of(self, record: DomainRecord) -> Sequence[DomainRecord]:
        self.calls.append(("dependents_of", self._domain, record.ref))
        return self.dependents.get(record.ref, [])

    async def erase_record(self, record: DomainRecord) -> ErasureAction:
        if self.fail_on == record.ref and self.error is not None:
            raise self.error
        self.calls.append(("erase", self._domain, record.ref))
        self.erased.append(record.ref)
        return ErasureAction.deleted(f"{record.kind}s", record.display_id)

    async def export_user_records(self, user_id) -> Sequence[ExportSection]:
        if self.export_error is not None:
            raise self.export_error
        return [
            ExportSection(
                name=self._domain,
                description=self.description,
                items=[ExportItem.from_mapping(r.data) for r in self.records],
            )
        ]


@pytest.fixture
def fake_adapter() -> type[FakeDomainAdapter]:
    """The FakeDomainAdapter class."""
    return FakeDomainAdapter


@pytest.fixture
def record() -> Callable[..., DomainRecord]:
    """Factory for DomainRecord snapshots."""
    return make_record


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with foreign keys enforced and all tables created."""
    engine = create_engine(test_settings)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


# Personal data seeded into the store. None of it may ever reach an
# erasure outcome or an audit entry.
PII = {
    "name": "Jane Q. Example",
    "address": "12 Rosemary Lane",
    "city": "Springfield",
    "zip": "SW1A 1AA",
    "ip": "203.0.113.77",
    "ua": "Mozilla/5.0 (X11; FixtureAgent)",
    "business": "Example Widgets Ltd",
    "vat": "EL123456789",
    "note": "Customer called from her mobile",
    "token": "tok_live_secret_123",
}


@dataclass
class SeededUser:
    """Ids of the rows seeded for one user."""

    user_id: int
    failed_subscription_id: int
    settled_subscription_id: int
    invoice_id: int
    invoice_number: str
    credit_note_id: int
    credit_note_number: str
    profile_id: int


async def seed_user(
    session_factory: async_sessionmaker[AsyncSession],
    user_id: int = 42,
    settled_age_days: int = 200,
) -> SeededUser:
    """Seed one failed subscription and one settled subscription with invoice and credit note."""
    now = datetime.now(UTC)
    async with session_factory() as session:
        failed = Subscription(
            user_id=user_id,
            level="PRO",
            paystate=PayState.FAILED,
            processor="paypal",
            processor_key="PP-FAILED-1",
            payment_token=PII["token"],
            net_amount=Decimal("10.00"),
            ip=PII["ip"],
            ua=PII["ua"],
            notes=PII["note"],
            created_on=now - timedelta(days=3),
        )
        settled = Subscription(
            user_id=user_id,
            level="PRO",
            paystate=PayState.COMPLETED,
            processor="paypal",
            processor_key="PP-SETTLED-1",
            payment_token=PII["token"],
            net_amount=Decimal("10.00"),
            ip=PII["ip"],
            ua=PII["ua"],
            notes=PII["note"],
            created_on=now - timedelta(days=settled_age_days),
        )
        session.add_all([failed, settled])
        await session.flush()

        invoice = Invoice(
            subscription_id=settled.id,
            display_number=f"INV-{user_id}-0001",
            invoice_date=now - timedelta(days=settled_age_days),
            gross_amount=Decimal("12.40"),
            html=f"<p>{PII['name']}, {PII['address']}</p>",
        )
        session.add(invoice)
        await session.flush()

        credit_note = CreditNote(
            invoice_id=invoice.id,
            display_number=f"CN-{user_id}-0001",
            credit_date=now - timedelta(days=settled_age_days - 1),
            html=f"<p>{PII['name']}</p>",
        )
        profile = SubscriptionUser(
            user_id=user_id,
            isbusiness=1,
            businessname=PII["business"],
            occupation="Engineer",
            vatnumber=PII["vat"],
            viesregistered=1,
            taxauthority="Athens",
            address1=PII["address"],
            address2="Flat 3",
            city=PII["city"],
            state="CA",
            zip=PII["zip"],
            country="US",
            params={"nickname": PII["name"]},
            notes=PII["note"],
            needs_logout=1,
        )
        session.add_all([credit_note, profile])
        await session.commit()

        return SeededUser(
            user_id=user_id,
            failed_subscription_id=failed.id,
            settled_subscription_id=settled.id,
            invoice_id=invoice.id,
            invoice_number=invoice.display_number,
            credit_note_id=credit_note.id,
            credit_note_number=credit_note.display_number,
            profile_id=profile.id,
        )


@pytest.fixture
def pii() -> dict[str, str]:
    return dict(PII)


@pytest_asyncio.fixture
async def seeded_user(session_factory: async_sessionmaker[AsyncSession]) -> SeededUser:
    """User 42 with no settled subscription inside the hold window."""
    return await seed_user(session_factory)


@pytest.fixture
def seed(session_factory: async_sessionmaker[AsyncSession]):
    """Seed additional users: ``await seed(user_id=7, settled_age_days=10)``."""

    async def _seed(**kwargs: Any) -> SeededUser:
        return await seed_user(session_factory, **kwargs)

    return _seed


# =============================================================================
# Service and API fixtures
# =============================================================================


@pytest.fixture
def service(
    test_settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> DataComplianceService:
    return build_service(test_settings, session_factory)


@pytest.fixture
def test_app(test_settings: Settings, service: DataComplianceService) -> FastAPI:
    """FastAPI application wired to the in-memory store."""
    from datacompliance.api.app import create_app

    return create_app(settings=test_settings, service=service)


@pytest_asyncio.fixture
async def test_client(test_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client calling the test application directly."""
    async with AsyncClient(
        transport=ASGITransport(app=test_app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def admin_headers() -> dict[str, str]:
    """Administrator allowed to view the audit trail."""
    return {
        "X-Actor-Id": "admin-1",
        "X-Actor-Capabilities": f"{VIEW_TRAIL_CAPABILITY},core.admin,core.delete,core.edit",
    }


@pytest.fixture
def user_headers() -> dict[str, str]:
    """Plain user without any audit capability."""
    return {"X-Actor-Id": "user-42"}
