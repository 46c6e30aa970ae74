"""A small application used to exercise component scanning."""
