"""Secret store that resolves key ids from environment variables."""

import logging
import os
from collections.abc import Mapping

from quant_cloud_ai.application.interfaces.secret_store import SecretStore

logger = logging.getLogger(__name__)


class EnvironmentSecretStore(SecretStore):
    """Reads secrets from the environment, delegating writes to ``fallback``.

    A key id ``my_token`` is looked up as ``my_token`` and then as
    ``MY_TOKEN``. When neither is set the fallback store is asked. Writes
    and deletes always go to the fallback, so tokens obtained through
    OAuth are persisted while operator-provided tokens stay in the
    environment.
    """

    def __init__(
        self,
        fallback: SecretStore | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._fallback = fallback
        self._environ = environ if environ is not None else os.environ

    async def get_value(self, key_id: str) -> str | None:
        for name in (key_id, key_id.upper()):
            value = self._environ.get(name)
            if value:
                return value
        if self._fallback is not None:
            return await self._fallback.get_value(key_id)
        return None

    async def set_value(self, key_id: str, value: str) -> None:
        if self._fallback is None:
            raise RuntimeError(f"Cannot store secret '{key_id}': environment secrets are read-only")
        await self._fallback.set_value(key_id, value)

    async def delete(self, key_id: str) -> None:
        if self._fallback is None:
            logger.debug("No writable secret store; '%s' left untouched", key_id)
            return
        await self._fallback.delete(key_id)
