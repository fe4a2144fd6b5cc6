"""
Registration validation and participant composition.

validate_and_compose() decides whether a submission is acceptable and, if
so, builds the canonical Registration record. It performs no I/O: the
event policy table and the snapshot of existing registrations for the
registrant's email are passed in, and persistence is left to the caller.
The duplicate-solo check here is a fast path only; the registration store
re-checks it under its file lock.
"""
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple, Union

from navaspurthi.models.event_policy import (
    DEFAULT_TEAM_RANGE,
    EVENT_CLASSES,
    GROUP,
    SOLO,
    EventPolicy,
)
from navaspurthi.models.event_selection import EventSelection, Participant
from navaspurthi.models.registrant import Registrant
from navaspurthi.models.registration import (
    ROLE_PARTICIPANT,
    ROLE_PRIMARY,
    STATUS_CANCELLED,
    EventEntry,
    Registration,
    RosterEntry,
)
from navaspurthi.services.event_policy_service import EventPolicyTable, get_event_policies
from navaspurthi.utils.validation import (
    normalize_email,
    normalize_name,
    slugify,
    validate_email,
    validate_name,
    validate_phone,
    validate_year,
)

STATUS_OK = "ok"
STATUS_ERROR = "error"

PLACEHOLDER_EMAIL_DOMAIN = "participants.navaspurthi.local"
REGISTRATION_ID_PREFIX = "NV"

_BASE36 = string.digits + string.ascii_uppercase


class RejectionReason(str, Enum):
    MULTIPLE_SOLO_EVENTS = "MultipleSoloEvents"
    DUPLICATE_SOLO_REGISTRATION = "DuplicateSoloRegistration"
    INVALID_PARTICIPANT_COUNT = "InvalidParticipantCount"
    MISSING_REQUIRED_FIELD = "MissingRequiredField"
    UNKNOWN_EVENT_REFERENCE = "UnknownEventReference"
    DUPLICATE_EVENT_SELECTION = "DuplicateEventSelection"
    INVALID_FIELD_VALUE = "InvalidFieldValue"


@dataclass
class ValidationResult:
    """Outcome of validate_and_compose(); truthy when accepted."""

    status: str
    registration: Optional[Registration] = None
    reason: Optional[RejectionReason] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.status == STATUS_OK

    @classmethod
    def accepted(cls, registration: Registration) -> "ValidationResult":
        return cls(status=STATUS_OK, registration=registration, message="Registration successful")

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str, **details: Any) -> "ValidationResult":
        return cls(status=STATUS_ERROR, reason=reason, message=message, details=details)

    def to_dict(self) -> Dict[str, Any]:
        """Response body shape: registration on success, code and details on rejection."""
        if self:
            return {"status": self.status, "registration": self.registration.to_dict(), "message": self.message}
        return {
            "status": self.status,
            "code": self.reason.value if self.reason else None,
            "message": self.message,
            "details": self.details,
        }


class _Rejection(Exception):
    """Internal short-circuit carrying a rejection out of the rule helpers."""

    def __init__(self, result: ValidationResult):
        super().__init__(result.message)
        self.result = result


def _reject(reason: RejectionReason, message: str, **details: Any) -> None:
    raise _Rejection(ValidationResult.rejected(reason, message, **details))


@dataclass
class _ResolvedSelection:
    selection: EventSelection
    policy: EventPolicy


def _to_base36(number: int) -> str:
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits)) or "0"


def generate_registration_id() -> str:
    """
    Generate a registration ID such as "NV26-MGX3K2A1-7QZ4".

    Two-digit year, base36 millisecond timestamp, and four random base36
    characters.
    """
    year = datetime.now().strftime("%y")
    timestamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(4))
    return f"{REGISTRATION_ID_PREFIX}{year}-{timestamp}-{suffix}"


def _now_iso() -> str:
    return datetime.now().astimezone().isoformat()


def _resolve_selections(
    selections: List[EventSelection],
    table: EventPolicyTable,
    strict: bool,
) -> List[_ResolvedSelection]:
    """Attach a policy to every selection (partition step)."""
    resolved = []
    seen: Set[str] = set()

    for index, selection in enumerate(selections, start=1):
        if not selection.name:
            _reject(
                RejectionReason.MISSING_REQUIRED_FIELD,
                f"Event {index} missing name",
                field="events[].name",
                index=index,
            )

        policy = table.get(selection.name)
        if policy is None:
            if strict:
                _reject(
                    RejectionReason.UNKNOWN_EVENT_REFERENCE,
                    f"Unknown event: {selection.name}",
                    event=selection.name,
                )
            # Unknown events default to group unless the submission tags them
            event_class = selection.category if selection.category in EVENT_CLASSES else GROUP
            min_size, max_size = (1, 1) if event_class == SOLO else DEFAULT_TEAM_RANGE
            policy = EventPolicy(
                name=selection.name,
                event_class=event_class,
                min_size=min_size,
                max_size=max_size,
            )

        key = policy.name.lower()
        if key in seen:
            _reject(
                RejectionReason.DUPLICATE_EVENT_SELECTION,
                f"Event selected more than once: {policy.name}",
                event=policy.name,
            )
        seen.add(key)

        resolved.append(_ResolvedSelection(selection=selection, policy=policy))

    return resolved


def _snapshot_claims(
    existing: Iterable[Union[Registration, Dict[str, Any]]],
    email_key: str,
    table: EventPolicyTable,
) -> Tuple[Optional[str], Set[str]]:
    """
    Summarize active prior registrations for one email.

    Returns:
        (solo event name or None, lowercased names of all held events)
    """
    solo_event = None
    held: Set[str] = set()

    for record in existing or []:
        if isinstance(record, Registration):
            if not record.is_active() or normalize_email(record.email) != email_key:
                continue
            names = list(record.events)
            record_solo = record.solo_event
        elif isinstance(record, dict):
            if record.get("deleted_at") or record.get("status") == STATUS_CANCELLED:
                continue
            record_email = record.get("email")
            if record_email and normalize_email(record_email) != email_key:
                continue
            names = [
                event if isinstance(event, str) else event.get("name", "")
                for event in record.get("events") or []
            ]
            record_solo = record.get("solo_event")
            if record_solo is None:
                # Legacy rows lack solo_event; classify their events instead
                for name in names:
                    policy = table.get(name)
                    if policy is not None and policy.is_solo():
                        record_solo = policy.name
                        break
        else:
            continue

        for name in names:
            canonical = table.resolve_name(name) or name
            held.add(canonical.lower())
        if record_solo and solo_event is None:
            solo_event = record_solo

    return solo_event, held


def _check_team_size(item: _ResolvedSelection) -> None:
    policy = item.policy
    selection = item.selection

    if policy.event_class == GROUP:
        count = len(selection.participants or [])
    elif selection.has_participant_list:
        count = len(selection.participants)
    else:
        return

    if not policy.accepts_team_size(count):
        _reject(
            RejectionReason.INVALID_PARTICIPANT_COUNT,
            f"{policy.name}: {policy.describe_range()} participants required, got {count}",
            event=policy.name,
            min_size=policy.min_size,
            max_size=policy.max_size,
            supplied=count,
        )


def _placeholder_email(participant: Participant, event_name: str, index: int) -> str:
    return f"{slugify(participant.name)}.{slugify(event_name)}.{index}@{PLACEHOLDER_EMAIL_DOMAIN}"


def _team_members(
    item: _ResolvedSelection,
    registrant: Registrant,
    registrant_key: str,
) -> List[Tuple[str, str, Optional[str], bool]]:
    """
    Resolve one event's team to (email key, name, phone, is_placeholder).

    Selections without a participant list are performed by the registrant
    alone.
    """
    policy = item.policy
    selection = item.selection

    if not selection.has_participant_list:
        return [(registrant_key, registrant.name, registrant.phone, False)]

    members = []
    seen: Set[str] = set()
    for index, participant in enumerate(selection.participants, start=1):
        is_valid, error_msg = validate_name(participant.name)
        if not is_valid:
            reason = RejectionReason.MISSING_REQUIRED_FIELD if not participant.name else RejectionReason.INVALID_FIELD_VALUE
            _reject(
                reason,
                f"{policy.name}: participant {index} - {error_msg}",
                event=policy.name,
                field="participants[].name",
                index=index,
            )

        if participant.email:
            is_valid, error_msg = validate_email(participant.email)
            if not is_valid:
                _reject(
                    RejectionReason.INVALID_FIELD_VALUE,
                    f"{policy.name}: participant {index} has invalid email format",
                    event=policy.name,
                    field="participants[].email",
                    index=index,
                )
            key = normalize_email(participant.email)
            is_placeholder = False
        elif policy.is_solo() or normalize_name(participant.name) == normalize_name(registrant.name):
            key = registrant_key
            is_placeholder = False
        else:
            key = _placeholder_email(participant, policy.name, index)
            is_placeholder = True

        is_valid, error_msg = validate_phone(participant.phone)
        if not is_valid:
            _reject(
                RejectionReason.INVALID_FIELD_VALUE,
                f"{policy.name}: participant {index} - {error_msg}",
                event=policy.name,
                field="participants[].phone",
                index=index,
            )

        if key in seen:
            _reject(
                RejectionReason.INVALID_FIELD_VALUE,
                f"{policy.name}: {participant.name} is listed more than once",
                event=policy.name,
                field="participants[].email",
                index=index,
            )
        seen.add(key)

        if policy.is_solo() and key != registrant_key:
            _reject(
                RejectionReason.INVALID_FIELD_VALUE,
                f"{policy.name}: solo events must be performed by the registrant",
                event=policy.name,
                field="participants[].email",
                index=index,
            )

        members.append((key, participant.name, participant.phone, is_placeholder))

    return members


def _event_category(classes: List[str]) -> str:
    distinct = set(classes)
    if len(distinct) == 1:
        return classes[0]
    return "mixed"


def validate_and_compose(
    registrant: Registrant,
    selections: List[EventSelection],
    existing_registrations: Optional[Iterable[Union[Registration, Dict[str, Any]]]] = None,
    *,
    policies: Optional[EventPolicyTable] = None,
    strict: bool = False,
    id_factory: Optional[Callable[[], str]] = None,
    now: Optional[Callable[[], str]] = None,
) -> ValidationResult:
    """
    Validate a submission and compose its Registration.

    Args:
        registrant: The person submitting the form
        selections: Requested events, in submission order
        existing_registrations: Prior registrations for the registrant's
            email (Registration objects or stored dicts)
        policies: Event policy table (default: the active table)
        strict: Reject unknown event names instead of treating them as group events
        id_factory: Registration ID generator (default: generate_registration_id)
        now: Timestamp provider returning ISO 8601 strings

    Returns:
        ValidationResult with status "ok" and the new Registration (status
        "pending"), or status "error" with a RejectionReason and message.
    """
    table = policies if policies is not None else get_event_policies()
    id_factory = id_factory or generate_registration_id
    now = now or _now_iso

    try:
        # Registrant identity: strict
        is_valid, error_msg = validate_name(registrant.name)
        if not is_valid:
            reason = RejectionReason.MISSING_REQUIRED_FIELD if not registrant.name else RejectionReason.INVALID_FIELD_VALUE
            _reject(reason, error_msg, field="name")

        is_valid, error_msg = validate_email(registrant.email)
        if not is_valid:
            reason = RejectionReason.MISSING_REQUIRED_FIELD if not registrant.email else RejectionReason.INVALID_FIELD_VALUE
            _reject(reason, error_msg, field="email")

        for field_name, validator in (("phone", validate_phone), ("year", validate_year)):
            is_valid, error_msg = validator(getattr(registrant, field_name))
            if not is_valid:
                _reject(RejectionReason.INVALID_FIELD_VALUE, error_msg, field=field_name)

        if not selections:
            _reject(
                RejectionReason.MISSING_REQUIRED_FIELD,
                "At least one event must be selected",
                field="events",
            )

        registrant_key = normalize_email(registrant.email)

        # Partition
        resolved = _resolve_selections(list(selections), table, strict)

        # Solo-count rule
        solo_names = [item.policy.name for item in resolved if item.policy.is_solo()]
        if len(solo_names) > 1:
            _reject(
                RejectionReason.MULTIPLE_SOLO_EVENTS,
                f"Only one solo event can be selected (got: {', '.join(solo_names)})",
                events=solo_names,
            )

        prior_solo, held_events = _snapshot_claims(existing_registrations, registrant_key, table)
        if solo_names and prior_solo:
            _reject(
                RejectionReason.DUPLICATE_SOLO_REGISTRATION,
                f"This email already has a solo event registration ({prior_solo})",
                event=solo_names[0],
                existing_event=prior_solo,
            )

        already_held = [item.policy.name for item in resolved if item.policy.name.lower() in held_events]
        if already_held:
            _reject(
                RejectionReason.DUPLICATE_EVENT_SELECTION,
                f"Already registered for: {', '.join(already_held)}",
                events=already_held,
            )

        # Team-size rule
        for item in resolved:
            _check_team_size(item)

        # Participant identity and composition
        roster: Dict[str, RosterEntry] = {
            registrant_key: RosterEntry(
                name=registrant.name,
                email=registrant.email,
                role=ROLE_PRIMARY,
                phone=registrant.phone,
            )
        }
        event_details = []
        for item in resolved:
            members = _team_members(item, registrant, registrant_key)
            member_keys = []
            for key, name, phone, is_placeholder in members:
                entry = roster.get(key)
                if entry is None:
                    entry = RosterEntry(
                        name=name,
                        email=key,
                        role=ROLE_PARTICIPANT,
                        phone=phone,
                        placeholder_email=is_placeholder,
                    )
                    roster[key] = entry
                entry.events.append(item.policy.name)
                member_keys.append(entry.email)
            event_details.append(
                EventEntry(name=item.policy.name, event_class=item.policy.event_class, participants=member_keys)
            )

        timestamp = now()
        registration = Registration(
            registration_id=id_factory(),
            name=registrant.name,
            email=registrant.email,
            phone=registrant.phone,
            college=registrant.college,
            department=registrant.department,
            year=registrant.year,
            events=[item.policy.name for item in resolved],
            event_details=event_details,
            participants=list(roster.values()),
            total_participants=len(roster),
            event_category=_event_category([item.policy.event_class for item in resolved]),
            solo_event=solo_names[0] if solo_names else None,
            created_at=timestamp,
            updated_at=timestamp,
        )
    except _Rejection as rejection:
        return rejection.result

    return ValidationResult.accepted(registration)
