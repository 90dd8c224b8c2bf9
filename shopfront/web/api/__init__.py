"""shopfront API package."""
