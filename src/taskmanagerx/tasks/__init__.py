"""
Task subsystem.

Components:
- models.py: data structures (Company, Person, Task, HistoryEntry, NotificationConfig)
- dates.py: date formatting and deadline arithmetic
- manager.py: TaskManager, the in-memory state holder and its persistence side effects
- api.py: validated high-level operations used by front-ends
- watcher.py: background loop that re-runs the overdue sweep
"""
