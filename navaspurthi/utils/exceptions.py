"""Custom exception classes."""


class RegistrationNotFoundError(Exception):
    """Raised when a registration ID doesn't exist."""
    pass


class DuplicateSoloRegistrationError(Exception):
    """Raised by the store when an email already holds an active solo claim."""

    def __init__(self, email: str, event_name: str):
        super().__init__(f"{email} is already registered for a solo event ({event_name})")
        self.email = email
        self.event_name = event_name


class DuplicateEventRegistrationError(Exception):
    """Raised by the store when an email already holds one of the submitted events."""

    def __init__(self, email: str, event_names):
        super().__init__(f"{email} is already registered for: {', '.join(event_names)}")
        self.email = email
        self.event_names = list(event_names)


class InvalidStatusTransitionError(Exception):
    """Raised when a registration status change is not allowed."""

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class EventPolicyError(Exception):
    """Raised when the event policy table is malformed."""
    pass


class FileWriteError(IOError):
    """Raised when unable to write to JSON file."""
    pass


class AuthenticationError(Exception):
    """Raised when admin credentials are invalid."""
    pass
