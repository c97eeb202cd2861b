"""
SQLAlchemy ORM base classes for scaffolded resources.

Applications declare their own models on ``Base`` and mix in
``SoftDeleteMixin`` for resources that should be soft deleted.
"""

from .base import Base, TimestampMixin, SoftDeleteMixin

__all__ = [
    "Base",
    "TimestampMixin",
    "SoftDeleteMixin",
]
