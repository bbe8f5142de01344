"""shmock logging — hexagonal logging port and structlog adapter."""

from shmock.logging.port import LoggingPort
from shmock.logging.structlog_adapter import StructlogAdapter

__all__ = ["LoggingPort", "StructlogAdapter"]
