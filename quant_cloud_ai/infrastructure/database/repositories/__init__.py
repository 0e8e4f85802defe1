from .key_value_store import SQLAlchemySecretStore, SQLAlchemyStateStore

__all__ = [
    "SQLAlchemySecretStore",
    "SQLAlchemyStateStore",
]
