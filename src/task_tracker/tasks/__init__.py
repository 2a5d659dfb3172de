"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, UpdateResult)
- task_codec.py: JSON document <-> list[Task]
- task_store.py: JSON-file-backed repository with CRUD helpers
"""
