"""Hall availability data layer backed by a Google Sheets booking register."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("hall-availability")
except PackageNotFoundError:  # pragma: no cover - fallback during local dev
    __version__ = "0.0.0"

__all__ = ["__version__"]
