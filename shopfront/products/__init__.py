"""Products, each filed under one category."""
