"""Utilities for preparing HTML snippets before rendering in Streamlit."""
from html import escape
from textwrap import dedent

from navaspurthi.models.event_policy import EXCEPTION, GROUP, SOLO, EventPolicy
from navaspurthi.models.registration import Registration

CLASS_BADGE_COLORS = {
    SOLO: "#ec4899",
    GROUP: "#667eea",
    EXCEPTION: "#f59e0b",
}

CLASS_LABELS = {
    SOLO: "Solo",
    GROUP: "Group",
    EXCEPTION: "Special",
}

STATUS_EMOJI = {
    "pending": "⏳",
    "confirmed": "✅",
    "cancelled": "🚫",
}


def html_block(template: str) -> str:
    """
    Normalize multi-line HTML so Streamlit doesn't treat it as Markdown code.

    Streamlit's Markdown renderer reads lines with 4+ leading spaces as code
    blocks, so every line is dedented and left-stripped.
    """
    lines = dedent(template).splitlines()
    return "\n".join(line.lstrip() for line in lines).strip()


def event_badge_html(event_class: str) -> str:
    color = CLASS_BADGE_COLORS.get(event_class, "#64748b")
    label = CLASS_LABELS.get(event_class, event_class.title())
    return (
        f"<span style='background: {color}33; color: {color}; border: 1px solid {color}; "
        f"border-radius: 999px; padding: 2px 10px; font-size: 12px; font-weight: 600;'>{label}</span>"
    )


def event_card_html(policy: EventPolicy) -> str:
    """Card with the event name, class badge, team size and schedule."""
    schedule = policy.schedule or {}
    when = " · ".join(escape(schedule[k]) for k in ("day", "time", "venue") if schedule.get(k))
    return html_block(
        f"""
        <div class="event-card">
            <div class="event-card-title">{escape(policy.name)} {event_badge_html(policy.event_class)}</div>
            <div class="event-card-summary">{escape(policy.summary)}</div>
            <div class="event-card-meta">Team size: {policy.describe_range()}{' · ' + when if when else ''}</div>
        </div>
        """
    )


def registration_summary_html(registration: Registration) -> str:
    """Confirmation block shown after a successful submission."""
    rows = "".join(
        f"<li>{escape(entry.name)} {event_badge_html(entry.event_class)} "
        f"({len(entry.participants)} participant{'s' if len(entry.participants) != 1 else ''})</li>"
        for entry in registration.event_details
    )
    return html_block(
        f"""
        <div class="registration-summary">
            <div class="registration-id">Registration ID: <code>{escape(registration.registration_id)}</code></div>
            <div>{STATUS_EMOJI.get(registration.status, '')} Status: {escape(registration.status)}</div>
            <ul>{rows}</ul>
            <div>Total participants: {registration.total_participants}</div>
        </div>
        """
    )
