"""User accounts: signup, self-service update, soft delete."""
