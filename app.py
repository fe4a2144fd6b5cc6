"""
Navaspurthi 2025 registration app.

Run with: streamlit run app.py
"""
import logging
import uuid

import streamlit as st

from navaspurthi.ui.admin_panel import render_admin_panel
from navaspurthi.ui.help_chat import render_help_chat
from navaspurthi.ui.registration_form import render_registration_form

logger = logging.getLogger(__name__)

PAGES = {
    "register": render_registration_form,
    "help": render_help_chat,
    "admin": render_admin_panel,
}

st.set_page_config(
    page_title="Navaspurthi 2025",
    page_icon="🎉",
    layout="wide",
    initial_sidebar_state="collapsed"
)


def initialize_session_state():
    """Set session state defaults."""
    if "current_page" not in st.session_state:
        st.session_state.current_page = "register"

    if "admin_authenticated" not in st.session_state:
        st.session_state.admin_authenticated = False

    if "chat_session_id" not in st.session_state:
        st.session_state.chat_session_id = uuid.uuid4().hex

    # ?page=admin links straight to a page
    if "url_params_processed" not in st.session_state:
        page = st.query_params.get("page")
        if page in PAGES:
            st.session_state.current_page = page
        st.session_state.url_params_processed = True


def apply_custom_css():
    st.markdown("""
        <style>
        .stApp {
            background: linear-gradient(135deg, #0f0c29 0%, #1a1a2e 50%, #16213e 100%);
        }

        #MainMenu {visibility: hidden;}
        footer {visibility: hidden;}

        .stButton > button {
            border-radius: 12px;
            font-weight: 600;
        }

        .stButton > button[kind="primary"] {
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            color: white;
        }

        .event-card {
            background: #16213e;
            border: 1px solid #2d3748;
            border-radius: 12px;
            padding: 12px 16px;
            margin-bottom: 10px;
            color: #f1f5f9;
        }

        .event-card-title {font-weight: 700; font-size: 16px; margin-bottom: 4px;}
        .event-card-summary {color: #cbd5e1; font-size: 14px;}
        .event-card-meta {color: #94a3b8; font-size: 12px; margin-top: 6px;}

        .registration-summary {
            background: #10b98120;
            border-left: 4px solid #10b981;
            border-radius: 8px;
            padding: 12px 16px;
            color: #d1fae5;
        }
        </style>
    """, unsafe_allow_html=True)


def render_navigation():
    nav_col1, nav_col2, nav_col3 = st.columns(3, gap="small")

    with nav_col1:
        if st.button("📝 Register", width='stretch', key="nav_register"):
            st.session_state.current_page = "register"

    with nav_col2:
        if st.button("💬 Help", width='stretch', key="nav_help"):
            st.session_state.current_page = "help"

    with nav_col3:
        if st.button("👤 Admin", width='stretch', key="nav_admin"):
            st.session_state.current_page = "admin"


def render_current_page():
    """Render the page named by st.session_state.current_page."""
    render = PAGES.get(st.session_state.current_page)
    if render is None:
        st.error(f"Unknown page: {st.session_state.current_page}")
        if st.button("Back to registration"):
            st.session_state.current_page = "register"
            st.rerun()
        return

    try:
        render()
    except Exception as e:
        logger.exception("Unhandled exception while rendering page")
        st.error("Something went wrong, please try again later")

        with st.expander("🔍 Error details"):
            st.code(str(e))


def main():
    initialize_session_state()
    apply_custom_css()
    render_navigation()
    render_current_page()


if __name__ == "__main__":
    main()
