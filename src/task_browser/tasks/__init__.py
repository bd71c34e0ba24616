"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, BrowseRequest and its enums)
- task_store.py: SQLite-backed storage + browse entry point
- snapshot.py: JSON snapshots for in-memory browsing
"""
