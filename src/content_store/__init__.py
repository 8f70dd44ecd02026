"""Content store — versioned content documents with routing-tier sync."""

__version__ = "0.1.0"
