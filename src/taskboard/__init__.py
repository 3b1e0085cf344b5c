"""Personal task manager with reminders and optional cloud sync."""

__version__ = "0.1.0"
