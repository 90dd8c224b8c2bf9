"""shopfront package."""
