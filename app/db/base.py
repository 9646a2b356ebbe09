"""Declarative base shared by the models and Alembic."""

from __future__ import annotations

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models. Constraints are named explicitly on each model."""

    metadata = MetaData(naming_convention={"ix": "ix_%(column_0_label)s"})
