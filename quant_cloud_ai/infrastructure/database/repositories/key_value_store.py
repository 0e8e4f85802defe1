"""Key/value stores backed by the SQLAlchemy 'key_value' table."""

from typing import Any

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from quant_cloud_ai.application.interfaces import SecretStore, StateStore
from quant_cloud_ai.infrastructure.database.models.key_value import KeyValueModel


class _KeyValueCollection:
    """Shared CRUD for one collection of the key_value table.

    Each operation runs in its own session and commits immediately, so
    values are visible process-wide as soon as the call returns.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], collection: str):
        self._session_factory = session_factory
        self._collection = collection

    async def read(self, name: str, default: Any = None) -> Any:
        async with self._session_factory() as session:
            row = await session.get(KeyValueModel, (self._collection, name))
            if row is None:
                return default
            return row.value

    async def write(self, name: str, value: Any) -> None:
        async with self._session_factory() as session:
            row = await session.get(KeyValueModel, (self._collection, name))
            if row is None:
                session.add(KeyValueModel(collection=self._collection, name=name, value=value))
            else:
                row.value = value
            await session.commit()

    async def remove(self, name: str) -> None:
        async with self._session_factory() as session:
            await session.execute(
                delete(KeyValueModel).where(
                    KeyValueModel.collection == self._collection,
                    KeyValueModel.name == name,
                )
            )
            await session.commit()


class SQLAlchemyStateStore(StateStore):
    """Implements the StateStore port using SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], collection: str = "state"):
        self._table = _KeyValueCollection(session_factory, collection)

    async def get(self, key: str, default: Any = None) -> Any:
        return await self._table.read(key, default)

    async def set(self, key: str, value: Any) -> None:
        await self._table.write(key, value)

    async def delete(self, key: str) -> None:
        await self._table.remove(key)


class SQLAlchemySecretStore(SecretStore):
    """Implements the SecretStore port using SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], collection: str = "secrets"):
        self._table = _KeyValueCollection(session_factory, collection)

    async def get_value(self, key_id: str) -> str | None:
        value = await self._table.read(key_id)
        return str(value) if value is not None else None

    async def set_value(self, key_id: str, value: str) -> None:
        await self._table.write(key_id, value)

    async def delete(self, key_id: str) -> None:
        await self._table.remove(key_id)
