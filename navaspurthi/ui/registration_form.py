"""Public registration page: event catalogue and the registration form."""
import logging
from typing import Any, Dict, List

import streamlit as st

from navaspurthi.models.event_policy import EXCEPTION, GROUP, SOLO
from navaspurthi.services.event_policy_service import get_event_policies
from navaspurthi.services.registration_service import submit_registration
from navaspurthi.ui.html_utils import event_card_html, registration_summary_html
from navaspurthi.utils.validation import VALID_YEARS

logger = logging.getLogger(__name__)


def parse_team_lines(text: str) -> List[Dict[str, Any]]:
    """
    Parse teammate lines of the form "Name, email, phone".

    Email and phone are optional; blank lines are skipped.

    Example:
        >>> parse_team_lines("Ravi K, ravi@example.com\\nMeera")
        [{'name': 'Ravi K', 'email': 'ravi@example.com'}, {'name': 'Meera'}]
    """
    members = []
    for line in (text or "").splitlines():
        parts = [part.strip() for part in line.split(",")]
        if not parts[0]:
            continue
        member = {"name": parts[0]}
        if len(parts) > 1 and parts[1]:
            member["email"] = parts[1]
        if len(parts) > 2 and parts[2]:
            member["phone"] = parts[2]
        members.append(member)
    return members


def build_submission(form: Dict[str, Any], selected: List[str], teams: Dict[str, str]) -> Dict[str, Any]:
    """
    Turn form widget values into a registration payload.

    Group events get the registrant as first team member followed by the
    teammates typed for that event.
    """
    policies = get_event_policies()
    events = []
    for event_name in selected:
        policy = policies.get(event_name)
        entry: Dict[str, Any] = {"name": event_name}
        if policy is not None and policy.event_class == GROUP:
            registrant = {"name": form.get("name", ""), "email": form.get("email", "")}
            entry["participants"] = [registrant] + parse_team_lines(teams.get(event_name, ""))
        events.append(entry)

    payload = dict(form)
    payload["events"] = events
    return payload


def _render_catalogue():
    grouped = get_event_policies().by_class()
    tabs = st.tabs(["🎭 Group", "🎤 Solo", "📸 Special"])
    for tab, event_class in zip(tabs, (GROUP, SOLO, EXCEPTION)):
        with tab:
            for policy in grouped[event_class]:
                st.markdown(event_card_html(policy), unsafe_allow_html=True)


def render_registration_form():
    """Render the registration page."""
    st.markdown("## 📝 Navaspurthi 2025 Registration")
    st.caption("One solo event per email. Special events can be combined with a solo event.")

    with st.expander("📚 Event catalogue", expanded=False):
        _render_catalogue()

    policies = get_event_policies()

    name = st.text_input("Full name", max_chars=100, key="reg_name")
    email = st.text_input("Email", key="reg_email")
    contact_col, year_col = st.columns(2, gap="small")
    with contact_col:
        phone = st.text_input("Phone (optional)", key="reg_phone")
    with year_col:
        year = st.selectbox("Year", [""] + VALID_YEARS, key="reg_year")
    college = st.text_input("College", key="reg_college")
    department = st.text_input("Department", key="reg_department")

    selected = st.multiselect("Events", policies.names(), key="reg_events")

    teams: Dict[str, str] = {}
    for event_name in selected:
        policy = policies.get(event_name)
        if policy is None or policy.event_class != GROUP:
            continue
        teams[event_name] = st.text_area(
            f"{event_name} teammates ({policy.describe_range()} including you)",
            key=f"reg_team_{event_name}",
            placeholder="One per line: Name, email, phone",
        )

    if st.button("🎫 Register", type="primary", width='stretch'):
        form = {
            "name": name,
            "email": email,
            "phone": phone,
            "year": year,
            "college": college,
            "department": department,
        }
        try:
            result = submit_registration(build_submission(form, selected, teams))
        except Exception:
            logger.exception("Unhandled exception while submitting registration")
            st.error("❌ Registration failed, please try again later")
            return

        if result:
            st.success(f"✅ {result.message}")
            st.markdown(registration_summary_html(result.registration), unsafe_allow_html=True)
            st.balloons()
        else:
            st.error(f"❌ {result.message}")
