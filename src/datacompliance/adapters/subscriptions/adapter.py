"""Domain adapter for the subscriptions store.

Erasure policy:
- failed transactions (paystate "N") are deleted;
- every other subscription is kept for accounting and pseudonymized;
- invoices and credit notes are deleted, credit note first;
- the invoicing profile is pseudonymized;
- pseudonymized rows lose their user_id, so they are no longer the user's records.
"""

from collections.abc import AsyncIterator, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from datacompliance.adapters.subscriptions.models import (
    CreditNote,
    Invoice,
    PayState,
    Subscription,
    SubscriptionUser,
)
from datacompliance.core.exceptions import RecordConstraintViolated, StoreUnavailable
from datacompliance.core.logging import get_logger
from datacompliance.db.models.base import Base
from datacompliance.erasure.pseudonymizer import (
    PSEUDONYMIZED_NOTE,
    PseudonymizationMethod,
    PseudonymizationRule,
    Pseudonymizer,
)
from datacompliance.erasure.types import normalize_identifier
from datacompliance.types import (
    DomainRecord,
    ErasureAction,
    ExportItem,
    ExportSection,
    UserID,
)

logger = get_logger(__name__)

DOMAIN = "subscriptions"

SUBSCRIPTION = "subscription"
INVOICE = "invoice"
CREDIT_NOTE = "creditnote"
PROFILE = "user"

SETTLED_STATES = frozenset({PayState.COMPLETED})
EXPORT_EXCLUDED_FIELDS = frozenset({"payment_token"})

WIPED_PROCESSOR = "DATA_COMPLIANCE_WIPED"

SUBSCRIPTION_RULES = [
    *PseudonymizationRule.detach("user_id"),
    PseudonymizationRule.redact("processor", WIPED_PROCESSOR),
    PseudonymizationRule("processor_key", PseudonymizationMethod.PSEUDONYM_KEY),
    *PseudonymizationRule.blank("ip", "ua"),
    PseudonymizationRule.redact("notes", PSEUDONYMIZED_NOTE),
]

PROFILE_RULES = [
    *PseudonymizationRule.detach("user_id"),
    *PseudonymizationRule.reset("isbusiness", "viesregistered", "needs_logout"),
    *PseudonymizationRule.blank(
        "businessname", "occupation", "vatnumber", "taxauthority", "address2", "state"
    ),
    PseudonymizationRule.redact("address1", "Address Redacted"),
    PseudonymizationRule.redact("city", "City Redacted"),
    PseudonymizationRule.redact("zip", "REMOVED"),
    PseudonymizationRule.redact("country", "XX"),
    PseudonymizationRule("params", PseudonymizationMethod.EMPTY_MAPPING),
    PseudonymizationRule.redact("notes", PSEUDONYMIZED_NOTE),
]

SECTION_DESCRIPTIONS = {
    "subscriptions": "Subscription transactions",
    "invoices": "Invoices",
    "creditnotes": "Credit notes",
    "users": "Invoicing information",
}


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops the timezone; stored times are UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def _row_data(row: Base) -> dict[str, Any]:
    return {column.name: getattr(row, column.name) for column in row.__table__.columns}


class SubscriptionsAdapter:
    """Enumerate, export and erase a user's subscription data.

    Every operation opens its own session. Records are returned as plain
    DomainRecord snapshots; related rows are fetched explicitly by
    dependents_of().
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        pseudonymizer: Pseudonymizer | None = None,
    ):
        self._session_factory = session_factory
        self._pseudonymizer = pseudonymizer or Pseudonymizer()

    @property
    def domain(self) -> str:
        return DOMAIN

    @property
    def description(self) -> str:
        return "Subscriptions, invoices, credit notes and invoicing information"

    # Record snapshots

    def _subscription_record(self, row: Subscription) -> DomainRecord:
        return DomainRecord(
            domain=DOMAIN,
            kind=SUBSCRIPTION,
            key=row.id,
            display_id=str(row.id),
            lifecycle_state=row.paystate,
            settled=row.paystate in SETTLED_STATES,
            created_at=_aware(row.created_on),
            data=_row_data(row),
        )

    def _invoice_record(self, row: Invoice) -> DomainRecord:
        return DomainRecord(
            domain=DOMAIN,
            kind=INVOICE,
            key=row.id,
            display_id=normalize_identifier(row.display_number),
            created_at=_aware(row.invoice_date),
            data=_row_data(row),
        )

    def _credit_note_record(self, row: CreditNote) -> DomainRecord:
        return DomainRecord(
            domain=DOMAIN,
            kind=CREDIT_NOTE,
            key=row.id,
            display_id=normalize_identifier(row.display_number),
            created_at=_aware(row.credit_date),
            data=_row_data(row),
        )

    def _profile_record(self, row: SubscriptionUser) -> DomainRecord:
        return DomainRecord(
            domain=DOMAIN,
            kind=PROFILE,
            key=row.id,
            display_id=str(row.id),
            data=_row_data(row),
        )

    def _store_error(
        self,
        operation: str,
        error: SQLAlchemyError,
        record: DomainRecord | None = None,
    ) -> Exception:
        """Translate a SQLAlchemy error without leaking statement parameters."""
        if isinstance(error, IntegrityError):
            return RecordConstraintViolated(
                DOMAIN,
                record.ref if record is not None else "-",
                "the record is still referenced or violates a constraint",
            )
        return StoreUnavailable(DOMAIN, operation, type(error).__name__)

    # DomainAdapter

    async def list_user_records(self, user_id: UserID) -> AsyncIterator[DomainRecord]:
        try:
            async with self._session_factory() as session:
                subscriptions = (
                    await session.scalars(
                        select(Subscription)
                        .where(Subscription.user_id == user_id)
                        .order_by(Subscription.id)
                    )
                ).all()
                profile = await session.scalar(
                    select(SubscriptionUser).where(SubscriptionUser.user_id == user_id)
                )
        except SQLAlchemyError as e:
            raise self._store_error("list_user_records", e) from e

        for row in subscriptions:
            yield self._subscription_record(row)
        if profile is not None:
            yield self._profile_record(profile)

    async def dependents_of(self, record: DomainRecord) -> Sequence[DomainRecord]:
        try:
            async with self._session_factory() as session:
                if record.kind == SUBSCRIPTION:
                    invoice = await session.scalar(
                        select(Invoice).where(Invoice.subscription_id == record.key)
                    )
                    return [self._invoice_record(invoice)] if invoice is not None else []
                if record.kind == INVOICE:
                    credit_note = await session.scalar(
                        select(CreditNote).where(CreditNote.invoice_id == record.key)
                    )
                    return [self._credit_note_record(credit_note)] if credit_note is not None else []
        except SQLAlchemyError as e:
            raise self._store_error("dependents_of", e, record) from e

        return []

    async def erase_record(self, record: DomainRecord) -> ErasureAction:
        if record.kind == CREDIT_NOTE:
            await self._delete(CreditNote, record)
            return ErasureAction.deleted("creditnotes", record.display_id)

        if record.kind == INVOICE:
            await self._delete(Invoice, record)
            return ErasureAction.deleted("invoices", record.display_id)

        if record.kind == SUBSCRIPTION:
            if record.lifecycle_state == PayState.FAILED:
                await self._delete(Subscription, record)
                return ErasureAction.deleted("subscriptions_deleted", record.key)

            cleared = await self._pseudonymize(Subscription, record, SUBSCRIPTION_RULES)
            return ErasureAction.anonymized("subscriptions_anonymized", record.key, cleared)

        if record.kind == PROFILE:
            cleared = await self._pseudonymize(SubscriptionUser, record, PROFILE_RULES)
            return ErasureAction.anonymized("users", record.key, cleared)

        raise ValueError(f"Unknown record kind for {DOMAIN}: {record.kind}")

    async def _delete(self, model: type[Base], record: DomainRecord) -> None:
        try:
            async with self._session_factory() as session:
                await session.execute(delete(model).where(model.id == record.key))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("erase_record", e, record) from e

        logger.debug("record_deleted", domain=DOMAIN, record_ref=record.ref)

    async def _pseudonymize(
        self,
        model: type[Base],
        record: DomainRecord,
        rules: list[PseudonymizationRule],
    ) -> list[str]:
        changes, result = self._pseudonymizer.apply(record.data, rules)
        try:
            async with self._session_factory() as session:
                await session.execute(update(model).where(model.id == record.key).values(**changes))
                await session.commit()
        except SQLAlchemyError as e:
            raise self._store_error("erase_record", e, record) from e

        logger.debug(
            "record_pseudonymized",
            domain=DOMAIN,
            record_ref=record.ref,
            fields=result.fields_cleared,
        )
        return result.fields_cleared

    async def export_user_records(self, user_id: UserID) -> Sequence[ExportSection]:
        try:
            async with self._session_factory() as session:
                subscriptions = (
                    await session.scalars(
                        select(Subscription)
                        .where(Subscription.user_id == user_id)
                        .order_by(Subscription.id)
                    )
                ).all()
                subscription_ids = [row.id for row in subscriptions]

                invoices = (
                    await session.scalars(
                        select(Invoice)
                        .where(Invoice.subscription_id.in_(subscription_ids))
                        .order_by(Invoice.id)
                    )
                ).all()
                invoice_ids = [row.id for row in invoices]

                credit_notes = (
                    await session.scalars(
                        select(CreditNote)
                        .where(CreditNote.invoice_id.in_(invoice_ids))
                        .order_by(CreditNote.id)
                    )
                ).all()

                profile = await session.scalar(
                    select(SubscriptionUser).where(SubscriptionUser.user_id == user_id)
                )
        except SQLAlchemyError as e:
            raise self._store_error("export_user_records", e) from e

        rows_by_section: dict[str, Sequence[Base]] = {
            "subscriptions": subscriptions,
            "invoices": invoices,
            "creditnotes": credit_notes,
            "users": [profile] if profile is not None else [],
        }
        return [
            ExportSection(
                name=name,
                description=SECTION_DESCRIPTIONS[name],
                items=[
                    ExportItem.from_mapping(_row_data(row), exclude=EXPORT_EXCLUDED_FIELDS)
                    for row in rows
                ],
            )
            for name, rows in rows_by_section.items()
        ]
