"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Subtask, Category, FilterCriteria, Statistics)
- task_codec.py: stored-record <-> model conversion with defaults
- task_repository.py / category_repository.py: snapshot-replace CRUD
- task_filters.py: filtered view + statistics (pure)
- reminder_monitor.py: polling reminder check
- task_api.py: high-level operations on AppState used by connectors
"""
