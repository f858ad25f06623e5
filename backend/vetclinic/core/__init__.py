# Core package initialization
# Cross-cutting concerns: configuration, errors, logging, auth, validation

from . import config, exceptions, validation

__all__ = [
    "config",
    "exceptions",
    "validation",
]
