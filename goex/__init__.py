"""Two-pane file manager core: locations, entries, local and GCS backends, seed data."""

__version__ = "0.1.0"

__all__ = ["__version__"]