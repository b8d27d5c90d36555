"""
Configuration Loader

Handles loading and validating YAML/JSON configuration files for schema
discovery. Supports environment variable substitution for sensitive values.
"""

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator
from dotenv import load_dotenv

from model_schema.core.schema.cache import DEFAULT_CACHE_KEY


# Load environment variables from .env file if present
load_dotenv()


class DatabaseConfig(BaseModel):
    """Database used to read column metadata."""
    
    url: str | None = Field(
        default=None,
        description="SQLAlchemy database URL; without it only model code is inspected",
    )
    table_prefix: str = Field(default="", description="Prefix prepended to every table name")
    echo: bool = Field(default=False, description="Echo SQL issued by the inspector")


class CacheConfig(BaseModel):
    """Schema cache settings."""
    
    directory: str | None = Field(
        default=None,
        description="Directory for cache files (memory only when unset)",
    )
    key: str = Field(default=DEFAULT_CACHE_KEY, min_length=1, description="Cache key")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    console_output: bool = Field(default=True, description="Print progress to the console")


class SchemaConfig(BaseModel):
    """Root configuration for schema discovery."""
    
    model_config = ConfigDict(protected_namespaces=())
    
    name: str = Field(default="schema", description="Project name")
    
    model_locations: list[str] = Field(
        ...,
        min_length=1,
        description="Directories holding model modules",
    )
    base_class: str = Field(
        ...,
        description="Declarative base models derive from, as 'package.module:Name'",
    )
    base_path: str | None = Field(
        default=None,
        description="Root for relative model locations (defaults to the config file's directory)",
    )
    model_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds allowed for inspecting one model (unbounded when unset)",
    )
    
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    
    @field_validator("base_class")
    @classmethod
    def validate_base_class(cls, v: str) -> str:
        """Validate the 'module:Name' format."""
        if not re.match(r"^[A-Za-z_][\w.]*:[A-Za-z_][\w.]*$", v):
            raise ValueError(f"Invalid base class reference (expected 'module:Name'): {v}")
        return v


class ConfigLoader:
    """
    Loads and validates schema configuration from YAML/JSON files.
    
    Supports environment variable substitution using ${VAR_NAME} syntax.
    
    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load("schema.yaml")
        >>> print(config.model_locations)
    """
    
    # Pattern for environment variable substitution
    ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")
    
    def __init__(self, env_file: Path | None = None):
        """
        Initialize config loader.
        
        Args:
            env_file: Optional path to .env file
        """
        if env_file:
            load_dotenv(env_file)
    
    def load(self, config_path: str | Path) -> SchemaConfig:
        """
        Load configuration from file.
        
        Relative model locations resolve against the config file's
        directory unless ``base_path`` is set.
        
        Args:
            config_path: Path to YAML or JSON config file
            
        Returns:
            Validated SchemaConfig object
            
        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(config_path)
        
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        
        content = path.read_text(encoding="utf-8")
        
        # Substitute environment variables
        content = self._substitute_env_vars(content)
        
        # Parse YAML (also handles JSON as subset of YAML)
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse configuration: {e}") from e
        
        if not isinstance(data, dict):
            raise ValueError("Configuration must be a dictionary")
        
        # Validate with Pydantic
        try:
            config = SchemaConfig.model_validate(data)
        except Exception as e:
            raise ValueError(f"Configuration validation failed: {e}") from e
        
        if config.base_path is None:
            config.base_path = str(path.resolve().parent)
        return config
    
    def _substitute_env_vars(self, content: str) -> str:
        """
        Replace ${VAR_NAME} with environment variable values.
        
        Args:
            content: Configuration content string
            
        Returns:
            Content with substituted values
        """
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            value = os.environ.get(var_name)
            if value is None:
                raise ValueError(
                    f"Environment variable '{var_name}' is not set. "
                    f"Please set it or update the configuration."
                )
            return value
        
        return self.ENV_PATTERN.sub(replace, content)
    
    def validate_file(self, config_path: str | Path) -> list[str]:
        """
        Check a configuration file, including that its model locations exist.
        
        Returns:
            Error messages (empty if valid)
        """
        try:
            config = self.load(config_path)
        except (FileNotFoundError, ValueError) as e:
            return [str(e)]
        
        base_path = Path(config.base_path)
        errors = []
        for location in config.model_locations:
            directory = Path(location)
            if not directory.is_absolute():
                directory = base_path / directory
            if not directory.is_dir():
                errors.append(f"Model location not found: {directory}")
        return errors
    
    @staticmethod
    def create_example_config(output_path: str | Path) -> None:
        """
        Create an example configuration file.
        
        Args:
            output_path: Where to write the example config
        """
        example = {
            "name": "shop",
            "model_locations": ["app/models"],
            "base_class": "app.models.base:Base",
            "database": {
                "url": "${DATABASE_URL}",
                "table_prefix": "",
            },
            "cache": {
                "directory": "./.schema_cache",
                "key": DEFAULT_CACHE_KEY,
            },
            "logging": {
                "level": "INFO",
                "console_output": True,
            },
        }
        
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(example, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
