"""SchemaMigration model - Record of applied schema migrations."""

from datetime import datetime
from sqlmodel import SQLModel, Field
from .mixins import utcnow
from .types import NaiveDateTime


class SchemaMigration(SQLModel, table=True):
    """One row per applied migration version."""

    __tablename__ = "schema_migrations"

    version: str = Field(primary_key=True)
    applied_at: datetime = Field(default_factory=utcnow, nullable=False, sa_type=NaiveDateTime)
