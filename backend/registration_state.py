"""Registration status labels and the rules for moving between them.

A status is a label staff correct over time rather than a locked lifecycle:
new registrations always start at Pending and any label may move to any other.
"""

from typing import Dict, FrozenSet, Optional, Union

from models import RegistrationStatus
from results import ErrorKind, QueryResult

INITIAL_STATUS = RegistrationStatus.PENDING

TRANSITIONS: Dict[RegistrationStatus, FrozenSet[RegistrationStatus]] = {
    status: frozenset(RegistrationStatus) for status in RegistrationStatus
}

_BY_LABEL = {status.value.lower(): status for status in RegistrationStatus}


def _normalize_label(value: Union[str, RegistrationStatus, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, RegistrationStatus):
        return value.value.lower()
    normalized = str(value).strip().lower()
    return normalized or None


def parse_status(value: Union[str, RegistrationStatus, None]) -> Optional[RegistrationStatus]:
    label = _normalize_label(value)
    if label is None:
        return None
    return _BY_LABEL.get(label)


def coerce_status(value: Union[str, RegistrationStatus, None]) -> QueryResult[RegistrationStatus]:
    status = parse_status(value)
    if status is None:
        allowed = ", ".join(item.value for item in RegistrationStatus)
        return QueryResult.fail(f"Invalid status '{value}'. Expected one of: {allowed}", ErrorKind.VALIDATION)
    return QueryResult.ok(status)


def can_transition(current: RegistrationStatus, target: RegistrationStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def check_transition(current: RegistrationStatus, target: Union[str, RegistrationStatus]) -> QueryResult[RegistrationStatus]:
    parsed = coerce_status(target)
    if not parsed.success:
        return parsed
    if not can_transition(current, parsed.data):
        return QueryResult.fail(
            f"Cannot move a {current.value} registration to {parsed.data.value}",
            ErrorKind.VALIDATION,
        )
    return parsed


def summarize_statuses(statuses) -> Dict[str, int]:
    counts = {status.value: 0 for status in RegistrationStatus}
    for status in statuses:
        parsed = parse_status(status)
        if parsed is not None:
            counts[parsed.value] += 1
    return counts
