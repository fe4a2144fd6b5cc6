"""Event selection and participant data models."""
from dataclasses import dataclass, field
from typing import Any, List, Optional

from navaspurthi.models.registrant import clean_text


@dataclass
class Participant:
    """One team member listed under an event selection."""

    name: Optional[str]
    email: Optional[str] = None
    phone: Optional[str] = None

    def __post_init__(self):
        self.name = clean_text(self.name)
        self.email = clean_text(self.email)
        self.phone = clean_text(self.phone)

    @classmethod
    def from_dict(cls, data: Any) -> "Participant":
        # A bare string is accepted as a name-only entry
        if isinstance(data, str):
            return cls(name=data)
        if not isinstance(data, dict):
            return cls(name=None)
        return cls(
            name=data.get("name") or data.get("fullName"),
            email=data.get("email"),
            phone=data.get("phone"),
        )


@dataclass
class EventSelection:
    """
    One requested event.

    A selection without a participant list (participants is None) is
    solo-like: the registrant is the sole participant. An empty list is
    kept distinct from None so team-size checks can report it.
    """

    name: Optional[str]
    category: Optional[str] = None
    participants: Optional[List[Participant]] = field(default=None)

    def __post_init__(self):
        self.name = clean_text(self.name)
        self.category = clean_text(self.category)
        if self.category:
            self.category = self.category.lower()

    @property
    def has_participant_list(self) -> bool:
        return self.participants is not None

    @classmethod
    def from_dict(cls, data: Any) -> "EventSelection":
        """
        Build a selection from a submitted event entry.

        Args:
            data: Either an event name string or a dict with "name",
                optional "category" and optional "participants".
        """
        if isinstance(data, str):
            return cls(name=data)
        if not isinstance(data, dict):
            return cls(name=None)

        raw_participants = data.get("participants")
        participants = None
        if isinstance(raw_participants, list):
            participants = [Participant.from_dict(p) for p in raw_participants]

        return cls(
            name=data.get("name"),
            category=data.get("category"),
            participants=participants,
        )
