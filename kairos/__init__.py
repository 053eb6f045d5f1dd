"""
Kairos: urgency-ranked tasks, habits and recurring chores.

Packages:
    - lib: date arithmetic, tags, exceptions, error codes, logging
    - config: urgency constants and runtime settings
    - core: task and context snapshots
    - models: SQLAlchemy models
    - services: urgency engine, habit state machine, recurring generator
    - api: FastAPI surface
"""

__version__ = "0.1.0"
