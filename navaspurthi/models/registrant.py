"""Registrant data model for festival registration."""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


def clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class Registrant:
    """Person submitting the registration form."""

    name: Optional[str]
    email: Optional[str]
    phone: Optional[str] = None
    college: Optional[str] = None
    department: Optional[str] = None
    year: Optional[str] = None

    def __post_init__(self):
        """Trim all fields; blank strings become None."""
        self.name = clean_text(self.name)
        self.email = clean_text(self.email)
        self.phone = clean_text(self.phone)
        self.college = clean_text(self.college)
        self.department = clean_text(self.department)
        self.year = clean_text(self.year)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Registrant":
        """Build a registrant from a submission, accepting legacy "fullName"."""
        return cls(
            name=payload.get("name") or payload.get("fullName"),
            email=payload.get("email"),
            phone=payload.get("phone"),
            college=payload.get("college"),
            department=payload.get("department"),
            year=payload.get("year"),
        )

    def to_dict(self) -> Dict[str, Optional[str]]:
        return asdict(self)
