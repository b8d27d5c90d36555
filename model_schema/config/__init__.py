"""
Configuration management for schema discovery.
"""

from model_schema.config.loader import (
    ConfigLoader,
    SchemaConfig,
    DatabaseConfig,
    CacheConfig,
    LoggingConfig,
)

__all__ = [
    "ConfigLoader",
    "SchemaConfig",
    "DatabaseConfig",
    "CacheConfig",
    "LoggingConfig",
]
