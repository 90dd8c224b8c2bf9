"""WEB API for shopfront."""
