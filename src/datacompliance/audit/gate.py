"""Authorization gate for the audit trail.

Viewing is a capability check. Mutating is never a capability: every
mutating task maps to "denied" and nothing consults a permission for it.
"""

from typing import Protocol, runtime_checkable

from datacompliance.core.context import VIEW_TRAIL_CAPABILITY, Actor
from datacompliance.core.exceptions import AuditMutationDenied

# Every task a generic record controller offers, mapped to whether it may
# ever run against audit entries.
AUDIT_TASK_PRIVILEGES: dict[str, bool] = {
    "*editown": False,
    "add": False,
    "apply": False,
    "archive": False,
    "cancel": False,
    "copy": False,
    "edit": False,
    "loadhistory": False,
    "orderup": False,
    "orderdown": False,
    "publish": False,
    "remove": False,
    "forceRemove": False,
    "save": False,
    "savenew": False,
    "saveorder": False,
    "trash": False,
    "unpublish": False,
}

READ_TASKS = frozenset({"browse", "read"})


@runtime_checkable
class AuthorizationGate(Protocol):
    """Decides whether an actor may view audit entries."""

    def may_view_audit_trail(self, actor: Actor) -> bool: ...


class CapabilityGate:
    """Grants audit viewing to actors holding a capability."""

    def __init__(self, capability: str = VIEW_TRAIL_CAPABILITY):
        self.capability = capability

    def may_view_audit_trail(self, actor: Actor) -> bool:
        return actor.has_capability(self.capability)


def assert_task_allowed(task: str) -> None:
    """Reject any audit task other than reading.

    Unknown tasks are rejected as well. The answer is the same for every actor.

    Raises:
        AuditMutationDenied: For every mutating or unknown task
    """
    if task in READ_TASKS:
        return
    if not AUDIT_TASK_PRIVILEGES.get(task, False):
        raise AuditMutationDenied(task)
