"""VCS-related exception classes.

Contains all exception classes for backend operations:
- VcsError: Base exception for version-control errors
- NotARepositoryError: Raised when no backend recognises the working directory
- NoChangesError: Raised when a diff request produces nothing to review
- ContextFetchError: Raised when hidden context lines cannot be fetched
"""


class VcsError(Exception):
    """Custom exception for version-control errors."""

    pass


class NotARepositoryError(VcsError):
    """Raised when no jj, git or hg repository is found."""

    pass


class NoChangesError(VcsError):
    """Raised when there are no changes to review."""

    pass


class ContextFetchError(VcsError):
    """Raised when expanding one hidden-context gap fails."""

    pass
