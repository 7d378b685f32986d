"""Document model - schemaless rows backing every collection."""

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime, Index
from sqlmodel import Field, SQLModel

from monteerly.models.base import utc_now


class Document(SQLModel, table=True):
    """A single document in a named collection.

    `data` holds the document's fields as JSON. `owner_id` mirrors the
    document's `ownerId` field so owner-scoped queries can use an index.
    """

    __tablename__ = "documents"
    __table_args__ = (Index("ix_documents_collection_owner", "collection", "owner_id"),)

    collection: str = Field(primary_key=True, max_length=64)
    id: str = Field(primary_key=True, max_length=64)
    owner_id: str | None = Field(default=None, max_length=128)
    data: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
    updated_at: datetime = Field(
        default_factory=utc_now, sa_column=Column(DateTime(timezone=True), nullable=False)
    )
