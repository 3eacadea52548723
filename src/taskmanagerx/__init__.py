"""TaskManagerX: company, people and task tracking with local reminders."""

__version__ = "1.0.0"
