"""ORM Models — SQLAlchemy declarative models for all persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Like is owned by this service; UserProfile is a read-only view

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before create_all
      and Alembic autogenerate run
"""

from app.models.like import Like  # noqa: F401
from app.models.user_profile import UserProfile  # noqa: F401
