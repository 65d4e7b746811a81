"""Session persistence exception classes.

Contains:
- SessionError: Raised when a session cannot be written
"""


class SessionError(Exception):
    """Raised when a review session cannot be saved or deleted."""

    pass
