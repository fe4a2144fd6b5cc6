"""Admin panel UI component for registration review."""
import logging
import traceback

import streamlit as st

from navaspurthi.models.registration import (
    STATUS_CANCELLED,
    STATUS_CONFIRMED,
    VALID_STATUSES,
    Registration,
)
from navaspurthi.services.admin_service import is_admin_authenticated, login_admin, logout_admin
from navaspurthi.services.event_policy_service import get_event_policies
from navaspurthi.services.registration_service import (
    delete_registration,
    export_registrations_csv,
    get_registration_stats,
    list_registrations,
    update_registration_status,
)
from navaspurthi.ui.html_utils import STATUS_EMOJI, html_block
from navaspurthi.utils.exceptions import InvalidStatusTransitionError, RegistrationNotFoundError

logger = logging.getLogger(__name__)

PAGE_SIZE = 25


def _show_admin_exception(error: Exception, context: str) -> None:
    """Display error details in UI and log full traceback."""
    logger.exception("Admin panel error during %s", context)

    st.error(f"❌ {context} failed: {error}")
    with st.expander("🔍 Error details"):
        st.code("".join(traceback.format_exception(type(error), error, error.__traceback__)))


def _set_feedback(level: str, message: str) -> None:
    st.session_state["admin_feedback"] = (level, message)


def _show_feedback() -> None:
    feedback = st.session_state.pop("admin_feedback", None)
    if not feedback:
        return
    level, message = feedback
    {"success": st.success, "error": st.error, "warning": st.warning}.get(level, st.info)(message)


def render_login_page():
    """Render admin login page."""
    with st.form("admin_login_form", clear_on_submit=False):
        st.markdown("## 🔐 Admin Login")

        username = st.text_input("Username", key="admin_username_input")
        password = st.text_input("Password", type="password", key="admin_password_input")

        submit_col, cancel_col = st.columns(2, gap="small")
        with submit_col:
            submit = st.form_submit_button("Log in", width='stretch', type="primary")
        with cancel_col:
            cancel = st.form_submit_button("Back", width='stretch')

        if submit:
            if not username or not password:
                st.error("❌ Enter username and password")
            else:
                success, message = login_admin(username, password)
                if success:
                    st.success(f"✅ {message}")
                    st.rerun()
                else:
                    st.error(f"❌ {message}")

        if cancel:
            st.session_state.current_page = "register"


def _change_status(registration: Registration, new_status: str) -> None:
    try:
        update_registration_status(registration.registration_id, new_status)
        _set_feedback("success", f"{registration.registration_id} is now {new_status}")
    except (RegistrationNotFoundError, InvalidStatusTransitionError) as e:
        _set_feedback("error", str(e))


def _render_stats():
    stats = get_registration_stats()
    col1, col2, col3, col4 = st.columns(4, gap="small")
    col1.metric("Registrations", stats["total"])
    col2.metric("Participants", stats["total_participants"])
    col3.metric("Confirmed", stats["by_status"].get(STATUS_CONFIRMED, 0))
    col4.metric("Cancelled", stats["by_status"].get(STATUS_CANCELLED, 0))

    if stats["by_event"]:
        with st.expander("📊 Registrations per event"):
            st.bar_chart(stats["by_event"])


def _render_registration_row(registration: Registration) -> None:
    col1, col2, col3, col4 = st.columns([2.2, 1.4, 1, 1.4], gap="small")

    with col1:
        st.markdown(f"**{registration.name}** · `{registration.registration_id}`")
        st.caption(f"{registration.email} · {registration.college or '-'}")

    with col2:
        st.text(", ".join(registration.events))
        st.caption(f"{registration.total_participants} participants · {registration.event_category}")

    with col3:
        st.text(f"{STATUS_EMOJI.get(registration.status, '')} {registration.status}")

    with col4:
        btn_col1, btn_col2, btn_col3 = st.columns(3, gap="small")
        with btn_col1:
            if registration.can_transition_to(STATUS_CONFIRMED) and st.button(
                "✅", key=f"confirm_{registration.registration_id}", help="Confirm"
            ):
                _change_status(registration, STATUS_CONFIRMED)
                st.rerun()
        with btn_col2:
            if registration.can_transition_to(STATUS_CANCELLED) and st.button(
                "🚫", key=f"cancel_{registration.registration_id}", help="Cancel"
            ):
                _change_status(registration, STATUS_CANCELLED)
                st.rerun()
        with btn_col3:
            if st.button("🗑️", key=f"delete_{registration.registration_id}", help="Delete"):
                success, message = delete_registration(registration.registration_id)
                _set_feedback("success" if success else "error", message)
                st.rerun()

    with st.expander("Team roster"):
        for member in registration.participants:
            suffix = " (no email given)" if member.placeholder_email else ""
            st.text(f"{member.name} <{member.email}>{suffix}: {', '.join(member.events)}")


def render_admin_panel():
    """Render admin management panel."""
    try:
        if not is_admin_authenticated():
            render_login_page()
            return

        _show_feedback()

        st.markdown(
            html_block(
                """
                <div class="admin-header">
                    <h1 class="admin-title">📊 Admin Panel</h1>
                    <div class="admin-subtitle">Review and confirm registrations</div>
                </div>
                """
            ),
            unsafe_allow_html=True,
        )

        if st.button("🚪 Log out"):
            logout_admin()
            st.session_state.current_page = "register"
            st.rerun()

        _render_stats()

        filter_col1, filter_col2, filter_col3 = st.columns([2, 1.4, 1], gap="small")
        with filter_col1:
            email = st.text_input("Email", key="admin_filter_email")
        with filter_col2:
            event = st.selectbox("Event", [""] + get_event_policies().names(), key="admin_filter_event")
        with filter_col3:
            status = st.selectbox("Status", [""] + VALID_STATUSES, key="admin_filter_status")
        page = st.number_input("Page", min_value=1, value=1, step=1, key="admin_page")

        st.download_button(
            "📥 Export CSV",
            data=export_registrations_csv(status=status or None, event=event or None).encode("utf-8"),
            file_name="navaspurthi-registrations.csv",
            mime="text/csv",
            width='stretch',
            key="admin_export_csv",
        )

        registrations = list_registrations(
            email=email or None,
            event=event or None,
            status=status or None,
            limit=PAGE_SIZE,
            offset=(page - 1) * PAGE_SIZE,
        )

        if not registrations:
            st.info("📝 No registrations found")
            return

        for registration in registrations:
            _render_registration_row(registration)
    except Exception as error:
        _show_admin_exception(error, "Loading admin panel")
