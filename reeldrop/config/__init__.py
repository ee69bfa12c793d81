"""Process-wide configuration: logging and the cleanup scheduler."""
