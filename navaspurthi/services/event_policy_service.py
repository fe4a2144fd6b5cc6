"""Event policy table: classification and team-size ranges per event."""
import logging
import os
from typing import Any, Dict, List, Optional

from navaspurthi.models.event_policy import (
    EVENT_CLASSES,
    EXCEPTION,
    GROUP,
    SOLO,
    EventPolicy,
)
from navaspurthi.services.storage_service import load_json
from navaspurthi.utils.exceptions import EventPolicyError
from navaspurthi.utils.validation import normalize_event_key

logger = logging.getLogger(__name__)

# Optional JSON override, shaped like {"events": {"Cricket": {"class": "group", "min": 11, "max": 11}}}
EVENT_POLICY_FILE = os.getenv("EVENT_POLICY_FILE")

DEFAULT_EVENT_POLICIES: Dict[str, Dict[str, Any]] = {
    # Group events
    "Group Dance": {
        "class": GROUP, "min": 6, "max": 12, "aliases": [],
        "summary": "High-energy choreography performed by large crews with dramatic staging.",
        "schedule": {"day": "Day 3", "time": "5:00 PM", "venue": "Main Auditorium"},
    },
    "Cricket": {
        "class": GROUP, "min": 11, "max": 11, "aliases": [],
        "summary": "Short-format cricket tournament with knockout finals under floodlights.",
        "schedule": {"day": "Day 2", "time": "9:00 AM", "venue": "Main Ground"},
    },
    "Fashion Show": {
        "class": GROUP, "min": 4, "max": 12, "aliases": [],
        "summary": "Runway spectacle celebrating futurism with couture styling and storytelling.",
        "schedule": {"day": "Day 3", "time": "7:00 PM", "venue": "Main Auditorium"},
    },
    "Group Singing": {
        "class": GROUP, "min": 4, "max": 10, "aliases": [],
        "summary": "Choir ensembles harmonize across genres with live accompaniment.",
        "schedule": {"day": "Day 1", "time": "12:30 PM", "venue": "Open Air Theatre"},
    },
    "Skit Play": {
        "class": GROUP, "min": 6, "max": 8, "aliases": ["skit"],
        "summary": "Theatrical short plays with strong narratives and quick set transitions.",
        "schedule": {"day": "Day 1", "time": "3:00 PM", "venue": "Auditorium Studio"},
    },
    "Instrumental": {
        "class": GROUP, "min": 2, "max": 5, "aliases": [],
        "summary": "Bands showcase live instrumental arrangements.",
        "schedule": {"day": "Day 1", "time": "5:30 PM", "venue": "Music Hall"},
    },
    "Face Painting": {
        "class": GROUP, "min": 2, "max": 2, "aliases": [],
        "summary": "Duos craft futuristic looks blending art and storytelling.",
        "schedule": {"day": "Day 2", "time": "1:30 PM", "venue": "Design Studio"},
    },
    "Best out of Waste": {
        "class": GROUP, "min": 2, "max": 2, "aliases": [],
        "summary": "Teams upcycle materials into functional art pieces.",
        "schedule": {"day": "Day 2", "time": "11:30 AM", "venue": "Makers Lab"},
    },
    "Clay Modeling": {
        "class": GROUP, "min": 2, "max": 2, "aliases": ["clay modelling"],
        "summary": "Sculptors shape thematic clay artefacts live.",
        "schedule": {"day": "Day 2", "time": "4:30 PM", "venue": "Art Block"},
    },
    "Mehendi": {
        "class": GROUP, "min": 2, "max": 2, "aliases": ["mehndi"],
        "summary": "Intricate henna artistry inspired by cultural motifs.",
        "schedule": {"day": "Day 2", "time": "2:30 PM", "venue": "Cultural Court"},
    },
    "Designing": {
        "class": GROUP, "min": 2, "max": 2, "aliases": [],
        "summary": "Rapid prototyping challenge for futuristic product design.",
        "schedule": {"day": "Day 2", "time": "3:30 PM", "venue": "Innovation Hub"},
    },
    "Mystery Box": {
        "class": GROUP, "min": 2, "max": 2, "aliases": [],
        "summary": "Creative build-off where teams transform surprise materials.",
        "schedule": {"day": "Day 2", "time": "12:30 PM", "venue": "Makers Lab"},
    },
    "Dumb Charades": {
        "class": GROUP, "min": 3, "max": 5, "aliases": ["dumb charade"],
        "summary": "Guessing frenzy with cinematic and tech-themed prompts.",
        "schedule": {"day": "Day 1", "time": "4:30 PM", "venue": "Student Commons"},
    },
    "Quiz": {
        "class": GROUP, "min": 2, "max": 2, "aliases": [],
        "summary": "Two-member teams battle through tech and culture trivia.",
        "schedule": {"day": "Day 1", "time": "2:30 PM", "venue": "Seminar Hall"},
    },

    # Exception events: combinable with a solo event
    "Photography": {
        "class": EXCEPTION, "aliases": [],
        "summary": "Campus photowalk chronicling the spirit of Navaspurthi.",
        "schedule": {"day": "Day 3", "time": "9:00 AM", "venue": "Campus Grounds"},
    },
    "Videography": {
        "class": EXCEPTION, "aliases": [],
        "summary": "Filmmakers craft short narratives in a timed shoot-and-edit challenge.",
        "schedule": {"day": "Day 3", "time": "10:00 AM", "venue": "Media Lab"},
    },
    "Short Movie": {
        "class": EXCEPTION, "aliases": [],
        "summary": "Screening of short films produced ahead of the fest with live critique.",
        "schedule": {"day": "Day 3", "time": "11:00 AM", "venue": "Screening Room"},
    },
    "Reel Making": {
        "class": EXCEPTION, "aliases": ["reels"],
        "summary": "Content creators produce trending reels in a themed creative sprint.",
        "schedule": {"day": "Day 3", "time": "12:00 PM", "venue": "Media Lab"},
    },

    # Solo events
    "Solo Dance": {
        "class": SOLO, "aliases": [],
        "summary": "Spotlight performances blending classical and freestyle moves.",
        "schedule": {"day": "Day 1", "time": "11:30 AM", "venue": "Main Auditorium"},
    },
    "Solo Singing": {
        "class": SOLO, "aliases": [],
        "summary": "Vocalists perform prepared solo numbers with live judging.",
        "schedule": {"day": "Day 1", "time": "12:00 PM", "venue": "Main Auditorium"},
    },
    "Canva Painting": {
        "class": SOLO, "aliases": ["canvas painting"],
        "summary": "Digital illustration sprint themed around technology and culture.",
        "schedule": {"day": "Day 3", "time": "1:00 PM", "venue": "Design Studio"},
    },
    "Pencil Sketch": {
        "class": SOLO, "aliases": [],
        "summary": "Artists capture live inspirations using graphite mediums.",
        "schedule": {"day": "Day 3", "time": "2:00 PM", "venue": "Art Block"},
    },
    "Debate": {
        "class": SOLO, "aliases": [],
        "summary": "Contestants argue futuristic topics with structured rebuttals.",
        "schedule": {"day": "Day 1", "time": "1:30 PM", "venue": "Seminar Hall"},
    },
    "Extempore": {
        "class": SOLO, "aliases": [],
        "summary": "Think-on-your-feet speeches delivered on surprise themes.",
        "schedule": {"day": "Day 1", "time": "2:00 PM", "venue": "Seminar Hall"},
    },
    "Rangoli": {
        "class": SOLO, "aliases": [],
        "summary": "Floor art installations inspired by tradition and neon futurism.",
        "schedule": {"day": "Day 2", "time": "5:30 PM", "venue": "Cultural Court"},
    },
}


class EventPolicyTable:
    """Lookup of event policies by canonical name, key or alias."""

    def __init__(self, policies: List[EventPolicy]):
        self._policies: Dict[str, EventPolicy] = {}
        self._index: Dict[str, str] = {}

        for policy in policies:
            if policy.name in self._policies:
                raise EventPolicyError(f"Duplicate event in policy table: {policy.name}")
            self._policies[policy.name] = policy

            for key in [policy.name, *policy.aliases]:
                normalized = normalize_event_key(key)
                owner = self._index.get(normalized)
                if owner is not None and owner != policy.name:
                    raise EventPolicyError(
                        f"Event key '{key}' is claimed by both {owner} and {policy.name}"
                    )
                self._index[normalized] = policy.name

    def __len__(self) -> int:
        return len(self._policies)

    def __iter__(self):
        return iter(self._policies.values())

    def resolve_name(self, name: str) -> Optional[str]:
        """Map a submitted event name to its canonical name, or None if unknown."""
        if not name:
            return None
        return self._index.get(normalize_event_key(name))

    def get(self, name: str) -> Optional[EventPolicy]:
        canonical = self.resolve_name(name)
        if canonical is None:
            return None
        return self._policies[canonical]

    def names(self) -> List[str]:
        return list(self._policies)

    def by_class(self) -> Dict[str, List[EventPolicy]]:
        """Group policies by class, preserving table order."""
        grouped: Dict[str, List[EventPolicy]] = {event_class: [] for event_class in EVENT_CLASSES}
        for policy in self._policies.values():
            grouped[policy.event_class].append(policy)
        return grouped


def build_policy_table(config: Dict[str, Dict[str, Any]]) -> EventPolicyTable:
    """
    Build a policy table from a name -> entry mapping.

    Raises:
        EventPolicyError: If any entry is malformed
    """
    if not isinstance(config, dict) or not config:
        raise EventPolicyError("Event policy config must be a non-empty mapping")

    policies = []
    for name, entry in config.items():
        if not isinstance(entry, dict):
            raise EventPolicyError(f"Policy entry for {name} must be a mapping")
        try:
            policies.append(EventPolicy.from_dict(name, entry))
        except (TypeError, ValueError) as e:
            raise EventPolicyError(f"Invalid policy for {name}: {e}") from e

    return EventPolicyTable(policies)


def load_policy_file(file_path: str) -> EventPolicyTable:
    """
    Load a policy table from a JSON file.

    Args:
        file_path: Path to a JSON file with an "events" mapping

    Raises:
        FileNotFoundError: If file doesn't exist
        EventPolicyError: If the content is not a valid policy table
    """
    data = load_json(file_path)
    events = data.get("events") if isinstance(data, dict) else None
    if events is None:
        raise EventPolicyError(f"Missing 'events' mapping in {file_path}")
    return build_policy_table(events)


_policy_cache: Optional[EventPolicyTable] = None


def _clear_cache():
    """Clear the cached policy table."""
    global _policy_cache
    _policy_cache = None


def get_event_policies() -> EventPolicyTable:
    """
    Return the active policy table.

    Uses EVENT_POLICY_FILE when set, otherwise the built-in table. The
    result is cached until _clear_cache() is called.
    """
    global _policy_cache

    if _policy_cache is not None:
        return _policy_cache

    if EVENT_POLICY_FILE:
        logger.info(f"Loading event policies from {EVENT_POLICY_FILE}")
        _policy_cache = load_policy_file(EVENT_POLICY_FILE)
    else:
        _policy_cache = build_policy_table(DEFAULT_EVENT_POLICIES)

    return _policy_cache


def list_events_by_class() -> Dict[str, List[Dict[str, Any]]]:
    """Serializable view of the active table, grouped by class."""
    grouped = get_event_policies().by_class()
    return {
        event_class: [policy.to_dict() for policy in policies]
        for event_class, policies in grouped.items()
    }
