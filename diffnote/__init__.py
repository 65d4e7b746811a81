"""Review jj, git and hg changes and export typed review comments."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("diffnote")
except PackageNotFoundError:
    # Fallback for development mode
    __version__ = "0.0.0-dev"
