"""Session persistence for diffnote.

This package saves review state between runs and merges it back into a
freshly loaded diff:
- exceptions: SessionError
- models: SessionSnapshot, SCHEMA_VERSION
- paths: session_key, get_session_file
- storage: SessionStorage, build_snapshot
- reconcile: reconcile, ReconcileResult
- manager: ReviewSession, load_diff, open_session, save_session
"""

# Exceptions
from diffnote.session.exceptions import SessionError

# Models
from diffnote.session.models import (
    SCHEMA_VERSION,
    SessionSnapshot,
)

# Paths
from diffnote.session.paths import (
    get_session_file,
    session_key,
)

# Storage
from diffnote.session.storage import (
    SessionStorage,
    build_snapshot,
)

# Reconciliation
from diffnote.session.reconcile import (
    ReconcileResult,
    reconcile,
)

# Session lifecycle
from diffnote.session.manager import (
    ReviewSession,
    load_diff,
    open_session,
    save_session,
)


__all__ = [
    # Exceptions
    "SessionError",
    # Models
    "SCHEMA_VERSION",
    "SessionSnapshot",
    # Paths
    "get_session_file",
    "session_key",
    # Storage
    "SessionStorage",
    "build_snapshot",
    # Reconciliation
    "ReconcileResult",
    "reconcile",
    # Session lifecycle
    "ReviewSession",
    "load_diff",
    "open_session",
    "save_session",
]
