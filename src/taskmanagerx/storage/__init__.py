"""
Persistence.

- kv_store.py: SQLite-backed key-value store (JSON values)
- repository.py: typed collections (company, people, tasks, settings) over the store
"""
