"""SQLAlchemy ORM model for persistent key/value entries."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from quant_cloud_ai.infrastructure.database.base import Base


class KeyValueModel(Base):
    """ORM model — maps to the 'key_value' table.

    ``collection`` separates unrelated users of the table (provider state,
    stored secrets); ``name`` is the key inside the collection.
    """

    __tablename__ = "key_value"

    collection: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<KeyValueModel(collection='{self.collection}', name='{self.name}')>"
