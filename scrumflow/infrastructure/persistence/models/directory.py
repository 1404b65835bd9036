"""Project and user lookup tables.

Owned by the organization/project CRUD; the rules engine only reads the
project display name and user email from them.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from scrumflow.infrastructure.persistence.database import Base
from scrumflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    TimestampMixin,
)


class Project(CuidMixin, TimestampMixin, Base):
    """Project. Table: project."""

    __tablename__ = "project"

    org_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


class AppUser(CuidMixin, TimestampMixin, Base):
    """Application user. Table: app_user."""

    __tablename__ = "app_user"

    org_id: Mapped[str] = mapped_column(String, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
