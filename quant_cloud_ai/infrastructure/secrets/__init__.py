from .environment_secret_store import EnvironmentSecretStore

__all__ = ["EnvironmentSecretStore"]
