"""Domain package exports for settings, errors and the record adapter."""

from .errors import (
    BackendAuthenticationError,
    BackendError,
    ConfigurationError,
    DirectoryError,
)
from .ports import CredentialInput, DirectoryPort, DirectoryRecord, PoolStats
from .settings import CONFIG_PROPERTIES, ConfigProperty, Settings
from .user_record import RecordAdapter, external_id, generate_lockout_password

__all__ = [
    "BackendAuthenticationError",
    "BackendError",
    "CONFIG_PROPERTIES",
    "ConfigProperty",
    "ConfigurationError",
    "CredentialInput",
    "DirectoryError",
    "DirectoryPort",
    "DirectoryRecord",
    "PoolStats",
    "RecordAdapter",
    "Settings",
    "external_id",
    "generate_lockout_password",
]
