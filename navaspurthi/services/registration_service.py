"""Registration service: validate submissions and manage stored registrations."""
import csv
import io
import json
import logging
import os
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from navaspurthi.models.event_selection import EventSelection
from navaspurthi.models.registrant import Registrant
from navaspurthi.models.registration import VALID_STATUSES, Registration
from navaspurthi.services.event_policy_service import get_event_policies
from navaspurthi.services.registration_validator import (
    STATUS_ERROR,
    RejectionReason,
    ValidationResult,
    validate_and_compose,
)
from navaspurthi.services.storage_service import ensure_json_file, load_json, lock_file, save_json
from navaspurthi.utils.exceptions import (
    DuplicateEventRegistrationError,
    DuplicateSoloRegistrationError,
    InvalidStatusTransitionError,
    RegistrationNotFoundError,
)
from navaspurthi.utils.validation import normalize_email

logger = logging.getLogger(__name__)

REGISTRATIONS_FILE = os.getenv("REGISTRATIONS_FILE", "data/registrations.json")

SYSTEM_ERROR_MESSAGE = "System error, please try again later"


def is_strict_mode() -> bool:
    """Whether unknown event names are rejected (STRICT_EVENT_NAMES env var)."""
    return os.getenv("STRICT_EVENT_NAMES", "").strip().lower() in {"1", "true", "yes"}


def _timestamp() -> str:
    return datetime.now().astimezone().isoformat()


def _load_records() -> List[Dict[str, Any]]:
    """Read raw registration dicts; a missing file means no registrations yet."""
    try:
        data = load_json(REGISTRATIONS_FILE)
    except FileNotFoundError:
        return []
    return data.get("registrations", [])


def parse_events(raw_events: Any) -> List[EventSelection]:
    """
    Parse the submitted events field.

    Args:
        raw_events: A list of event entries, or a JSON string holding one
            (multipart form posts send events as a string)

    Raises:
        ValueError: If events is not a list or not valid JSON
    """
    if raw_events is None:
        return []
    if isinstance(raw_events, str):
        try:
            raw_events = json.loads(raw_events) if raw_events.strip() else []
        except json.JSONDecodeError as e:
            raise ValueError("Invalid events format") from e
    if not isinstance(raw_events, list):
        raise ValueError("Events must be provided as an array")
    return [EventSelection.from_dict(item) for item in raw_events]


def get_registrations_for_email(email: str) -> List[Registration]:
    """All stored registrations for an email, including cancelled ones."""
    key = normalize_email(email)
    return [
        Registration.from_dict(record)
        for record in _load_records()
        if normalize_email(record.get("email", "")) == key
    ]


def _insert_registration(registration: Registration) -> None:
    """
    Append a registration under the store lock.

    The file is re-read inside the lock and the email's active claims
    re-checked, so two concurrent submissions for one email cannot both
    hold a solo event or the same event.

    Raises:
        DuplicateSoloRegistrationError: If the email already holds an active solo claim
        DuplicateEventRegistrationError: If the email already holds one of the events
        IOError: If the store cannot be written
        TimeoutError: If the lock cannot be acquired
    """
    ensure_json_file(REGISTRATIONS_FILE, {"registrations": []})

    with lock_file(REGISTRATIONS_FILE):
        data = load_json(REGISTRATIONS_FILE)
        records = data.setdefault("registrations", [])
        key = normalize_email(registration.email)
        held_events = set()

        for record in records:
            if record.get("registration_id") == registration.registration_id:
                raise IOError(f"Registration ID collision: {registration.registration_id}")
            if normalize_email(record.get("email", "")) != key:
                continue
            existing = Registration.from_dict(record)
            if not existing.is_active():
                continue
            if registration.solo_event is not None and existing.holds_solo_claim():
                raise DuplicateSoloRegistrationError(registration.email, existing.solo_event)
            held_events.update(event.lower() for event in existing.events)

        already_held = [event for event in registration.events if event.lower() in held_events]
        if already_held:
            raise DuplicateEventRegistrationError(registration.email, already_held)

        records.append(registration.to_dict())
        save_json(REGISTRATIONS_FILE, data, backup=True)


def submit_registration(payload: Dict[str, Any], strict: Optional[bool] = None) -> ValidationResult:
    """
    Validate and store a registration submission.

    Args:
        payload: Submission with name/fullName, email, phone, college,
            department, year and events
        strict: Reject unknown event names (default: STRICT_EVENT_NAMES)

    Returns:
        ValidationResult
        - status "ok" with the stored Registration on success
        - status "error" with a RejectionReason on validation failure
        - status "error" with no reason on storage failure
    """
    if strict is None:
        strict = is_strict_mode()

    registrant = Registrant.from_payload(payload)
    try:
        selections = parse_events(payload.get("events"))
    except ValueError as e:
        return ValidationResult.rejected(RejectionReason.INVALID_FIELD_VALUE, str(e), field="events")

    existing = get_registrations_for_email(registrant.email) if registrant.email else []
    result = validate_and_compose(
        registrant,
        selections,
        existing,
        policies=get_event_policies(),
        strict=strict,
    )
    if not result:
        logger.info(f"Registration rejected for {registrant.email}: {result.reason.value} - {result.message}")
        return result

    registration = result.registration
    try:
        _insert_registration(registration)
    except DuplicateSoloRegistrationError as e:
        logger.info(f"Concurrent solo claim rejected for {e.email}: {e.event_name}")
        return ValidationResult.rejected(
            RejectionReason.DUPLICATE_SOLO_REGISTRATION,
            f"This email already has a solo event registration ({e.event_name})",
            event=registration.solo_event,
            existing_event=e.event_name,
        )
    except DuplicateEventRegistrationError as e:
        logger.info(f"Concurrent event claim rejected for {e.email}: {', '.join(e.event_names)}")
        return ValidationResult.rejected(
            RejectionReason.DUPLICATE_EVENT_SELECTION,
            f"Already registered for: {', '.join(e.event_names)}",
            events=e.event_names,
        )
    except (IOError, TimeoutError) as e:
        logger.error(f"File operation failed during registration: {e}")
        return ValidationResult(status=STATUS_ERROR, message=SYSTEM_ERROR_MESSAGE)

    logger.info(
        f"Registration {registration.registration_id} accepted for {registration.email}: "
        f"{', '.join(registration.events)} ({registration.total_participants} participants)"
    )
    return result


def list_registrations(
    email: Optional[str] = None,
    registration_id: Optional[str] = None,
    event: Optional[str] = None,
    status: Optional[str] = None,
    limit: Optional[int] = 50,
    offset: int = 0,
) -> List[Registration]:
    """
    List stored registrations, newest first.

    Soft-deleted registrations are excluded. Event filters accept any
    spelling the policy table resolves.
    """
    registrations = [Registration.from_dict(r) for r in _load_records() if not r.get("deleted_at")]

    if email:
        key = normalize_email(email)
        registrations = [r for r in registrations if normalize_email(r.email) == key]
    if registration_id:
        registrations = [r for r in registrations if r.registration_id == registration_id]
    if event:
        event_name = (get_event_policies().resolve_name(event) or event).lower()
        registrations = [r for r in registrations if event_name in {e.lower() for e in r.events}]
    if status:
        registrations = [r for r in registrations if r.status == status]

    registrations.sort(key=lambda r: r.created_at or "", reverse=True)
    if limit is None:
        return registrations[offset:]
    return registrations[offset:offset + limit]


def get_registration(registration_id: str) -> Registration:
    """
    Get a single registration by ID.

    Raises:
        RegistrationNotFoundError: If no live registration has this ID
    """
    for record in _load_records():
        if record.get("registration_id") == registration_id and not record.get("deleted_at"):
            return Registration.from_dict(record)
    raise RegistrationNotFoundError(f"Registration not found: {registration_id}")


def _update_record(registration_id: str, apply) -> Registration:
    """Apply a change to one stored record under the store lock."""
    ensure_json_file(REGISTRATIONS_FILE, {"registrations": []})

    with lock_file(REGISTRATIONS_FILE):
        data = load_json(REGISTRATIONS_FILE)
        for record in data.get("registrations", []):
            if record.get("registration_id") != registration_id or record.get("deleted_at"):
                continue
            registration = Registration.from_dict(record)
            apply(registration)
            registration.updated_at = _timestamp()
            record.update(registration.to_dict())
            save_json(REGISTRATIONS_FILE, data, backup=True)
            return registration

    raise RegistrationNotFoundError(f"Registration not found: {registration_id}")


def update_registration_status(registration_id: str, new_status: str) -> Registration:
    """
    Move a registration through its status workflow.

    pending -> confirmed | cancelled, confirmed -> cancelled.

    Raises:
        ValueError: If new_status is not a known status
        RegistrationNotFoundError: If registration doesn't exist
        InvalidStatusTransitionError: If the change is not allowed
    """
    if new_status not in VALID_STATUSES:
        raise ValueError(f"Status must be one of {VALID_STATUSES}")

    def apply(registration: Registration) -> None:
        if not registration.can_transition_to(new_status):
            raise InvalidStatusTransitionError(registration.status, new_status)
        registration.status = new_status

    registration = _update_record(registration_id, apply)
    logger.info(f"Registration {registration_id} is now {new_status}")
    return registration


def delete_registration(registration_id: str) -> Tuple[bool, str]:
    """
    Soft-delete a registration; it no longer holds any event claims.

    Returns:
        (True, "Registration deleted successfully") or (False, "Registration not found")
    """
    def apply(registration: Registration) -> None:
        registration.deleted_at = _timestamp()

    try:
        _update_record(registration_id, apply)
    except RegistrationNotFoundError:
        return False, "Registration not found"

    logger.info(f"Registration {registration_id} deleted")
    return True, "Registration deleted successfully"


def get_registration_stats() -> Dict[str, Any]:
    """Counts of live registrations by status and by event."""
    registrations = [Registration.from_dict(r) for r in _load_records() if not r.get("deleted_at")]
    by_event = Counter(event for r in registrations for event in r.events)
    return {
        "total": len(registrations),
        "total_participants": sum(r.total_participants for r in registrations),
        "by_status": dict(Counter(r.status for r in registrations)),
        "by_event": dict(by_event.most_common()),
    }


EXPORT_COLUMNS = [
    "Registration ID",
    "Name",
    "Email",
    "Phone",
    "College",
    "Department",
    "Year",
    "Events",
    "Total Participants",
    "Status",
    "Created At",
]


def export_registrations_csv(status: Optional[str] = None, event: Optional[str] = None) -> str:
    """
    Export live registrations as CSV text, newest first.

    Args:
        status: Only this status; None or "all" exports every status
        event: Only registrations holding this event (aliases accepted)
    """
    if status == "all":
        status = None
    registrations = list_registrations(event=event, status=status, limit=None)

    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(EXPORT_COLUMNS)
    for r in registrations:
        writer.writerow([
            r.registration_id,
            r.name,
            r.email,
            r.phone or "",
            r.college or "",
            r.department or "",
            r.year or "",
            "; ".join(r.events),
            r.total_participants,
            r.status,
            r.created_at or "",
        ])

    logger.info(f"Exported {len(registrations)} registrations to CSV")
    return buffer.getvalue()
