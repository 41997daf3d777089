"""Subscriptions domain: subscriptions, invoices, credit notes and invoicing profiles."""

from datacompliance.adapters.subscriptions.adapter import (
    DOMAIN,
    EXPORT_EXCLUDED_FIELDS,
    SETTLED_STATES,
    SubscriptionsAdapter,
)
from datacompliance.adapters.subscriptions.models import (
    CreditNote,
    Invoice,
    PayState,
    Subscription,
    SubscriptionUser,
)

__all__ = [
    "DOMAIN",
    "EXPORT_EXCLUDED_FIELDS",
    "SETTLED_STATES",
    "CreditNote",
    "Invoice",
    "PayState",
    "Subscription",
    "SubscriptionUser",
    "SubscriptionsAdapter",
]
