"""Admin authentication for the Streamlit admin page and the HTTP API."""
import hmac
import os
from pathlib import Path
from threading import Lock
from typing import Optional, Tuple

import streamlit as st

from navaspurthi.utils.exceptions import AuthenticationError

ADMIN_ENV_KEYS = {"ADMIN_USERNAME", "ADMIN_PASSWORD", "ADMIN_API_TOKEN"}

_ENV_LOADED = False
_ENV_LOCK = Lock()


def _load_admin_env() -> None:
    """Load admin credentials from .env file if present; real env vars win."""
    global _ENV_LOADED

    if _ENV_LOADED:
        return

    with _ENV_LOCK:
        if _ENV_LOADED:
            return

        env_path = Path(".env")
        if env_path.exists():
            for raw_line in env_path.read_text(encoding="utf-8").splitlines():
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue

                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"\'')

                if key in ADMIN_ENV_KEYS and key not in os.environ:
                    os.environ[key] = value

        _ENV_LOADED = True


def authenticate_admin(username: str, password: str) -> bool:
    """
    Check admin credentials against ADMIN_USERNAME / ADMIN_PASSWORD.

    An unset ADMIN_PASSWORD disables login entirely.
    """
    _load_admin_env()

    admin_username = os.getenv("ADMIN_USERNAME", "admin")
    admin_password = os.getenv("ADMIN_PASSWORD", "")
    if not admin_password:
        return False

    return hmac.compare_digest(username or "", admin_username) and hmac.compare_digest(
        password or "", admin_password
    )


def verify_api_token(token: Optional[str]) -> None:
    """
    Check an X-Admin-Token header value against ADMIN_API_TOKEN.

    Raises:
        AuthenticationError: If the token is missing, wrong, or no token is configured
    """
    _load_admin_env()

    expected = os.getenv("ADMIN_API_TOKEN", "")
    if not expected:
        raise AuthenticationError("Admin API is disabled: ADMIN_API_TOKEN not set")
    if not token or not hmac.compare_digest(token, expected):
        raise AuthenticationError("Invalid admin token")


def is_admin_authenticated() -> bool:
    """True if st.session_state['admin_authenticated'] is set."""
    return st.session_state.get("admin_authenticated", False)


def login_admin(username: str, password: str) -> Tuple[bool, str]:
    """
    Log in admin user.

    Returns:
        (True, "Login successful") or (False, "Invalid username or password")
    """
    if authenticate_admin(username, password):
        st.session_state["admin_authenticated"] = True
        return True, "Login successful"
    return False, "Invalid username or password"


def logout_admin() -> None:
    if "admin_authenticated" in st.session_state:
        del st.session_state["admin_authenticated"]
