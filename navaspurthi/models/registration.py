"""Registration data model."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_CANCELLED = "cancelled"

VALID_STATUSES = [STATUS_PENDING, STATUS_CONFIRMED, STATUS_CANCELLED]

# Allowed status changes; cancelled is terminal
STATUS_TRANSITIONS = {
    STATUS_PENDING: {STATUS_CONFIRMED, STATUS_CANCELLED},
    STATUS_CONFIRMED: {STATUS_CANCELLED},
    STATUS_CANCELLED: set(),
}

ROLE_PRIMARY = "primary"
ROLE_PARTICIPANT = "participant"


@dataclass
class RosterEntry:
    """A deduplicated participant in a composed registration."""

    name: str
    email: str
    role: str
    events: List[str] = field(default_factory=list)
    phone: Optional[str] = None
    placeholder_email: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "role": self.role,
            "events": list(self.events),
            "placeholder_email": self.placeholder_email,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RosterEntry":
        return cls(
            name=data["name"],
            email=data["email"],
            role=data.get("role", ROLE_PARTICIPANT),
            events=list(data.get("events", [])),
            phone=data.get("phone"),
            placeholder_email=data.get("placeholder_email", False),
        )


@dataclass
class EventEntry:
    """One accepted event with its resolved class and team."""

    name: str
    event_class: str
    participants: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "class": self.event_class,
            "participants": list(self.participants),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EventEntry":
        return cls(
            name=data["name"],
            event_class=data.get("class", "group"),
            participants=list(data.get("participants", [])),
        )


@dataclass
class Registration:
    """Accepted, persisted outcome of one validated submission."""

    registration_id: str
    name: str
    email: str
    events: List[str]
    event_details: List[EventEntry]
    participants: List[RosterEntry]
    total_participants: int
    event_category: str
    solo_event: Optional[str] = None
    phone: Optional[str] = None
    college: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None
    status: str = STATUS_PENDING
    created_at: Optional[str] = None  # ISO 8601 format
    updated_at: Optional[str] = None
    deleted_at: Optional[str] = None

    def __post_init__(self):
        """Validate registration data after initialization."""
        if not self.registration_id or not self.registration_id.strip():
            raise ValueError("Registration ID cannot be empty")

        if not self.events:
            raise ValueError("Registration must include at least one event")

        if self.status not in VALID_STATUSES:
            raise ValueError(f"Status must be one of {VALID_STATUSES}, got: {self.status}")

        if self.total_participants < 1:
            raise ValueError("Total participants must be at least 1")

        if self.total_participants != len(self.participants):
            raise ValueError(
                f"Total participants ({self.total_participants}) must match "
                f"roster size ({len(self.participants)})"
            )

    def is_active(self) -> bool:
        """A registration counts toward uniqueness rules until cancelled or deleted."""
        return self.deleted_at is None and self.status != STATUS_CANCELLED

    def holds_solo_claim(self) -> bool:
        return self.is_active() and self.solo_event is not None

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in STATUS_TRANSITIONS.get(self.status, set())

    def composed_fields(self) -> Dict[str, Any]:
        """Fields derived from the submission, excluding ID and timestamps."""
        data = self.to_dict()
        for key in ("registration_id", "created_at", "updated_at", "deleted_at"):
            data.pop(key)
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {
            "registration_id": self.registration_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "college": self.college,
            "department": self.department,
            "year": self.year,
            "events": list(self.events),
            "event_details": [e.to_dict() for e in self.event_details],
            "participants": [p.to_dict() for p in self.participants],
            "total_participants": self.total_participants,
            "event_category": self.event_category,
            "solo_event": self.solo_event,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "deleted_at": self.deleted_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registration":
        return cls(
            registration_id=data["registration_id"],
            name=data["name"],
            email=data["email"],
            phone=data.get("phone"),
            college=data.get("college"),
            department=data.get("department"),
            year=data.get("year"),
            events=list(data["events"]),
            event_details=[EventEntry.from_dict(e) for e in data.get("event_details", [])],
            participants=[RosterEntry.from_dict(p) for p in data.get("participants", [])],
            total_participants=data["total_participants"],
            event_category=data.get("event_category", "solo"),
            solo_event=data.get("solo_event"),
            status=data.get("status", STATUS_PENDING),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
            deleted_at=data.get("deleted_at"),
        )
