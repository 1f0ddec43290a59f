"""
Campaign-creator link state machine

Transition table, phase timestamps and the thread message templates
for each target status.

Valid Transitions (self-transitions are no-ops, never errors):
- INVITED -> APPLIED, APPROVED, REJECTED
- APPLIED -> APPROVED, REJECTED, WITHDRAWN
- APPROVED -> COMPLETED, REJECTED
- REJECTED, COMPLETED, WITHDRAWN -> (self only)
"""

from typing import Dict, FrozenSet, Optional

from .models import LinkStatus, MessageMetaType
from .protocols import EngineValidationError, InvalidTransitionError


ALLOWED_TRANSITIONS: Dict[LinkStatus, FrozenSet[LinkStatus]] = {
    LinkStatus.INVITED: frozenset({
        LinkStatus.INVITED,
        LinkStatus.APPLIED,
        LinkStatus.APPROVED,
        LinkStatus.REJECTED,
    }),
    LinkStatus.APPLIED: frozenset({
        LinkStatus.APPLIED,
        LinkStatus.APPROVED,
        LinkStatus.REJECTED,
        LinkStatus.WITHDRAWN,
    }),
    LinkStatus.APPROVED: frozenset({
        LinkStatus.APPROVED,
        LinkStatus.COMPLETED,
        LinkStatus.REJECTED,
    }),
    LinkStatus.REJECTED: frozenset({LinkStatus.REJECTED}),
    LinkStatus.COMPLETED: frozenset({LinkStatus.COMPLETED}),
    LinkStatus.WITHDRAWN: frozenset({LinkStatus.WITHDRAWN}),
}

ENTRY_STATUSES: FrozenSet[LinkStatus] = frozenset({LinkStatus.INVITED, LinkStatus.APPLIED})

# Column stamped when a link enters the status
PHASE_TIMESTAMPS: Dict[LinkStatus, str] = {
    LinkStatus.INVITED: "invited_at",
    LinkStatus.APPLIED: "applied_at",
    LinkStatus.APPROVED: "approved_at",
    LinkStatus.COMPLETED: "completed_at",
}

STATUS_MESSAGE_TEMPLATES: Dict[LinkStatus, str] = {
    LinkStatus.REJECTED: 'Your application for "{name}" was not selected.',
    LinkStatus.COMPLETED: 'Campaign "{name}" marked as completed.',
    LinkStatus.INVITED: 'You have been invited to "{name}".',
    LinkStatus.APPLIED: 'Creator applied for "{name}".',
    LinkStatus.WITHDRAWN: 'Creator withdrew from "{name}".',
}

DEFAULT_APPLY_MESSAGE = (
    'Hi! I’m interested in collaborating on "{name}". Please let me know next steps.'
)


def parse_link_status(value: Optional[str]) -> LinkStatus:
    """Case-insensitive status parse; unknown values are a validation error"""
    normalized = (value or "").strip().lower()
    try:
        return LinkStatus(normalized)
    except ValueError:
        raise EngineValidationError("Invalid status", field="status")


def can_transition(from_status: LinkStatus, to_status: LinkStatus) -> bool:
    """Check if transition is in the table"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, frozenset())


def ensure_transition(from_status: LinkStatus, to_status: LinkStatus) -> None:
    """Raise InvalidTransitionError naming both states if not allowed"""
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(from_status, to_status)


def is_terminal(status: LinkStatus) -> bool:
    """Only self-transitions remain"""
    return ALLOWED_TRANSITIONS[status] == frozenset({status})


def _with_note(body: str, note: Optional[str]) -> str:
    note = (note or "").strip()
    return f"{body}\n\nNote: {note}" if note else body


def build_status_message(status: LinkStatus, campaign_name: str, note: Optional[str] = None) -> str:
    """Thread message for a non-approval transition"""
    template = STATUS_MESSAGE_TEMPLATES.get(status)
    body = template.format(name=campaign_name) if template else f"Status updated to {status.value}."
    return _with_note(body, note)


def build_approval_message(campaign_name: str, order_id: str, note: Optional[str] = None) -> str:
    """Thread message for an approval with its order"""
    header = f'You are approved for "{campaign_name}".'
    note = (note or "").strip()
    if note:
        return f"{header}\n\nOrder #{order_id}\n\nNote: {note}"
    return f"{header}\n\nOrder #{order_id} has been created using the selected package."


def message_meta_type(status: LinkStatus) -> MessageMetaType:
    if status == LinkStatus.APPROVED:
        return MessageMetaType.CAMPAIGN_APPROVED
    return MessageMetaType.CAMPAIGN_STATUS


__all__ = [
    "ALLOWED_TRANSITIONS",
    "ENTRY_STATUSES",
    "PHASE_TIMESTAMPS",
    "STATUS_MESSAGE_TEMPLATES",
    "DEFAULT_APPLY_MESSAGE",
    "parse_link_status",
    "can_transition",
    "ensure_transition",
    "is_terminal",
    "build_status_message",
    "build_approval_message",
    "message_meta_type",
]
