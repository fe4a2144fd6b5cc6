"""
Festival help chatbot.

Replies come from one of three sources, tried in order:
- a keyword table of quick answers
- an OpenAI chat completion grounded in festival context built from the
  event policy table (only when OPENAI_API_KEY is set)
- a static fallback answer
"""
import logging
import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional

import openai
from openai import OpenAI

from navaspurthi.models.event_policy import EXCEPTION, GROUP, SOLO, EventPolicy
from navaspurthi.services.event_policy_service import get_event_policies

logger = logging.getLogger(__name__)

DEFAULT_CHATBOT_MODEL = "gpt-4o-mini"
FALLBACK_MODELS = ["gpt-4o-mini", "gpt-4.1-mini"]

REPLY_QUICK = "quick"
REPLY_AI = "ai"
REPLY_FALLBACK = "fallback"

FESTIVAL_OVERVIEW = (
    "Festival Overview:\n"
    "- Navaspurthi 2025 is a tech-cultural fest hosted by KLES BCA PC Jabin Science College, Hubballi.\n"
    "- Dates: March 15-17, 2025.\n"
    "- Venue: Campus at Vidyanagar, Hubballi.\n"
    "- Prizes worth over Rs 5,00,000 across competitions."
)

SELECTION_RULES = (
    "Event selection rules:\n"
    "- At most one solo event per email address, across all registrations.\n"
    "- Special events (Photography, Videography, Short Movie, Reel Making) can be combined with a solo event.\n"
    "- Team sizes are enforced exactly as listed for each group event."
)

SCHEDULE_HIGHLIGHTS = (
    "Schedule highlights:\n"
    "- Day 1 (Mar 15): Opening ceremony, cultural showcases, debate and quiz rounds.\n"
    "- Day 2 (Mar 16): Cricket league, design challenges, creative build-offs.\n"
    "- Day 3 (Mar 17): Media showcases, Fashion Show finale, closing ceremony."
)

CONTACT_INFO = (
    "Reach the core team at navaspurthi2025@klebcahubli.in "
    "or call +91 93530 00805 (Mon-Fri 9am-6pm)."
)

SUGGESTIONS = [
    "How do I register?",
    "What are the event dates?",
    "Tell me about the prizes",
    "Where is the venue?",
    "What events are available?",
    "How can I contact the organizers?",
]

FALLBACK_TEXT = (
    "I'm here to help with questions about Navaspurthi 2025! You can ask me about:\n"
    "- Event registration and team sizes\n"
    "- Schedule and timings\n"
    "- Venue details and directions\n"
    "- Prizes and contact info\n\n"
    "What would you like to know?"
)


@dataclass
class ChatbotReply:
    """A chatbot answer and where it came from."""
    text: str
    type: str
    model: Optional[str] = None


class WorkingModelCache:
    """
    Remembers which chat model last answered successfully.

    Candidates are tried in order until one works; the winner is reused
    until a call fails and the cache is invalidated.
    """

    def __init__(self, candidates: List[str]):
        self.candidates = [name for i, name in enumerate(candidates) if name and name not in candidates[:i]]
        self._working: Optional[str] = None

    def get(self) -> Optional[str]:
        return self._working

    def remember(self, model: str) -> None:
        if self._working != model:
            logger.info(f"Using chat model {model}")
        self._working = model

    def invalidate(self) -> None:
        if self._working is not None:
            logger.warning(f"Chat model {self._working} invalidated")
        self._working = None

    def ordered_candidates(self) -> List[str]:
        """The working model first, then the remaining candidates."""
        if self._working is None:
            return list(self.candidates)
        return [self._working] + [name for name in self.candidates if name != self._working]


def _format_event_line(policy: EventPolicy) -> str:
    schedule = policy.schedule or {}
    when = " | ".join(schedule[k] for k in ("day", "time", "venue") if schedule.get(k)) or "Schedule TBA"
    return f"- {policy.name}: {policy.summary} ({when})"


def build_event_summary() -> str:
    """One-paragraph list of events by class, from the active policy table."""
    grouped = get_event_policies().by_class()
    return "\n".join([
        f"Navaspurthi 2025 features {len(get_event_policies())} events:",
        f"- Special showcases: {', '.join(p.name for p in grouped[EXCEPTION])}",
        f"- Group battles: {', '.join(p.name for p in grouped[GROUP])}",
        f"- Solo spotlights: {', '.join(p.name for p in grouped[SOLO])}",
    ])


def build_festival_context() -> str:
    """System prompt context: overview, rules, full catalogue and schedule."""
    grouped = get_event_policies().by_class()
    sections = []
    for label, event_class in (("Special Events", EXCEPTION), ("Group Events", GROUP), ("Solo Events", SOLO)):
        policies = grouped[event_class]
        if not policies:
            continue
        lines = [
            f"{_format_event_line(p)} [team size {p.describe_range()}]" for p in policies
        ]
        sections.append(f"{label}:\n" + "\n".join(lines))

    return "\n\n".join([
        FESTIVAL_OVERVIEW,
        SELECTION_RULES,
        "Event Catalogue:\n" + "\n\n".join(sections),
        SCHEDULE_HIGHLIGHTS,
        f"Contact: {CONTACT_INFO}",
    ])


def quick_responses() -> Dict[str, str]:
    """Keyword -> canned answer, checked in insertion order."""
    return {
        "hi": "Hi there! Welcome to Navaspurthi 2025! How can I help you today?",
        "hello": "Hello! Ask me anything about Navaspurthi 2025: events, schedule or logistics.",
        "register": "Fill in the registration form with your details and pick your events. "
                    "Group events need the full team listed.",
        "registration": "Complete the registration form and confirm your events. "
                        "You'll get a registration ID once it is accepted.",
        "schedule": SCHEDULE_HIGHLIGHTS,
        "venue": "Venue: KLES BCA PC Jabin Science College, Vidyanagar, Hubballi.",
        "contact": CONTACT_INFO,
        "events": build_event_summary(),
        "prize": "We're giving away prizes worth over Rs 5,00,000 across competitions!",
        "accommodation": "Accommodation for outstation participants is available on prior request.",
        "dates": "Mark your calendar: March 15-17, 2025.",
        "lost id": "Share the registered email ID, and the help desk will resend your registration details.",
        "refund": "Registrations are non-refundable unless an event is cancelled by the organizers.",
        "team": SELECTION_RULES,
        "certificate": "Certificates are issued digitally to all participants and winners.",
        "parking": "Complimentary on-campus parking is available. Follow on-ground signage.",
        "food": "Food stalls and cafeterias stay open all day with vegetarian and vegan options.",
    }


# Keywords that also answer their plural form
PLURAL_KEYWORDS = {"prize", "team", "certificate"}


def _keyword_pattern(keyword: str) -> str:
    suffix = "s?" if keyword in PLURAL_KEYWORDS else ""
    return rf"\b{re.escape(keyword)}{suffix}\b"


def find_quick_response(message: str) -> Optional[str]:
    """Return the answer for the first keyword found as a whole word in message."""
    lower_message = message.lower()
    for keyword, response in quick_responses().items():
        if re.search(_keyword_pattern(keyword), lower_message):
            return response
    return None


_model_cache = WorkingModelCache([os.getenv("CHATBOT_MODEL", DEFAULT_CHATBOT_MODEL), *FALLBACK_MODELS])


def get_model_cache() -> WorkingModelCache:
    return _model_cache


def _ask_openai(message: str, api_key: str, cache: WorkingModelCache) -> Optional[ChatbotReply]:
    """
    Ask the chat model, walking the candidate list on missing models.

    Returns:
        ChatbotReply on success, None if every candidate failed
    """
    client = OpenAI(api_key=api_key)
    messages = [
        {
            "role": "system",
            "content": "You are the Navaspurthi 2025 festival assistant. Answer briefly and only "
                       "from the festival information below.\n\n" + build_festival_context(),
        },
        {"role": "user", "content": message},
    ]

    for model in cache.ordered_candidates():
        try:
            response = client.chat.completions.create(
                model=model,
                messages=messages,
                max_completion_tokens=500,
                timeout=30,
            )
        except openai.NotFoundError as e:
            logger.warning(f"Chat model {model} not available: {e}")
            cache.invalidate()
            continue
        except openai.APIError as e:
            logger.error(f"Chat completion failed on {model}: {e}")
            cache.invalidate()
            return None

        if not response.choices or not (response.choices[0].message.content or "").strip():
            logger.warning(f"Chat model {model} returned an empty answer")
            cache.invalidate()
            return None

        cache.remember(model)
        return ChatbotReply(text=response.choices[0].message.content.strip(), type=REPLY_AI, model=model)

    return None


def answer_question(message: str, session_id: Optional[str] = None) -> ChatbotReply:
    """
    Answer a visitor's question.

    Args:
        message: The question text
        session_id: Caller's chat session, used only for logging

    Raises:
        ValueError: If message is empty
    """
    if not message or not message.strip():
        raise ValueError("Message is required")

    quick = find_quick_response(message)
    if quick is not None:
        return ChatbotReply(text=quick, type=REPLY_QUICK)

    api_key = os.getenv("OPENAI_API_KEY")
    if api_key:
        reply = _ask_openai(message, api_key, get_model_cache())
        if reply is not None:
            logger.info(f"Chat session {session_id}: answered by {reply.model}")
            return reply
        logger.info(f"Chat session {session_id}: AI unavailable, using fallback")

    return ChatbotReply(text=FALLBACK_TEXT, type=REPLY_FALLBACK)


def get_suggestions() -> List[str]:
    return list(SUGGESTIONS)
