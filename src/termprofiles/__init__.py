"""Terminal profile store: schema-driven profiles persisted as JSON and addressable by URI."""

from termprofiles.core.profiles import X_TERMINAL_BASE_URI, get_profiles_store

__version__ = "0.1.0"

__all__ = ["X_TERMINAL_BASE_URI", "get_profiles_store", "__version__"]
