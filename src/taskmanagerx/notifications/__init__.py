"""
Local reminders.

- models.py: notification content and triggers
- scheduler.py: reminder planning and overdue queries
- platform.py: APScheduler-backed delivery
"""
