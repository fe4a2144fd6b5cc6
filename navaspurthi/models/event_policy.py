"""Event policy data model."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

SOLO = "solo"
GROUP = "group"
EXCEPTION = "exception"

EVENT_CLASSES = [SOLO, GROUP, EXCEPTION]

DEFAULT_TEAM_RANGE = (2, 6)


@dataclass
class EventPolicy:
    """Classification and team-size range for one festival event."""

    name: str
    event_class: str
    min_size: int
    max_size: int
    aliases: List[str] = field(default_factory=list)
    summary: str = ""
    schedule: Optional[Dict[str, str]] = None

    def __post_init__(self):
        """Validate policy data after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("Event name cannot be empty")

        if self.event_class not in EVENT_CLASSES:
            raise ValueError(f"Event class must be one of {EVENT_CLASSES}, got: {self.event_class}")

        if self.min_size < 1:
            raise ValueError(f"{self.name}: min_size must be at least 1")

        if self.min_size > self.max_size:
            raise ValueError(
                f"{self.name}: min_size ({self.min_size}) cannot exceed max_size ({self.max_size})"
            )

    @property
    def size_range(self) -> Tuple[int, int]:
        return (self.min_size, self.max_size)

    def is_solo(self) -> bool:
        return self.event_class == SOLO

    def accepts_team_size(self, count: int) -> bool:
        """Check if a participant list of this length fits the range."""
        return self.min_size <= count <= self.max_size

    def describe_range(self) -> str:
        """Human-readable team size, e.g. 'exactly 11' or '2-6'."""
        if self.min_size == self.max_size:
            return f"exactly {self.min_size}"
        return f"{self.min_size}-{self.max_size}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "class": self.event_class,
            "min_size": self.min_size,
            "max_size": self.max_size,
            "aliases": list(self.aliases),
            "summary": self.summary,
            "schedule": self.schedule,
        }

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> "EventPolicy":
        """
        Build a policy from a config entry.

        Args:
            name: Canonical event name (the config key)
            data: Entry with "class" and optional "min"/"max", "aliases",
                "summary" and "schedule". Solo events default to [1, 1],
                other classes to DEFAULT_TEAM_RANGE.
        """
        event_class = data.get("class", GROUP)
        default_min, default_max = (1, 1) if event_class == SOLO else DEFAULT_TEAM_RANGE
        return cls(
            name=name,
            event_class=event_class,
            min_size=int(data.get("min", default_min)),
            max_size=int(data.get("max", default_max)),
            aliases=list(data.get("aliases", [])),
            summary=data.get("summary", ""),
            schedule=data.get("schedule"),
        )
