"""
Configuration management for the Paperless uploader.

Uses pydantic-settings to load configuration from a YAML file,
environment variables (prefixed with ``UPLOADER_``) and .env files.
"""

from pathlib import Path
from typing import Annotated, List, Optional, Union

import yaml
from loguru import logger
from pydantic import ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsError,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from paperless_uploader.models.schemas import DispositionPolicy, PostUploadAction

DEFAULT_CONFIG_FILE = Path("config.yaml")

EXAMPLE_CONFIG = """paperless_url: "http://localhost:8000"
api_key: "your-api-key"
watch_folder: "consume"
# post_upload_action can be 'delete', 'move', or left empty to do nothing.
post_upload_action: ""
# processed_folder is where files are moved to if post_upload_action is 'move'.
processed_folder: "processed"
# A list of tags to apply to the document.
# tags:
#  - tag1
#  - tag2
"""


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or written."""


def check_log_level(value: str) -> str:
    """Normalise a level name, rejecting names loguru does not know."""
    value = value.strip().upper()
    try:
        logger.level(value)
    except ValueError as e:
        raise ValueError(f"unknown log level '{value}'") from e
    return value


class Settings(BaseSettings):
    """Application settings loaded from file and environment."""

    # Paperless Configuration
    paperless_url: str = "http://localhost:8000"
    api_key: str = ""

    # Watch Configuration
    watch_folder: Path = Path("watch")
    post_upload_action: PostUploadAction = PostUploadAction.NONE
    processed_folder: Path = Path("processed")
    tags: Annotated[List[str], NoDecode] = []

    # Runtime Configuration
    log_level: str = "INFO"
    settle_delay: float = 1.0  # seconds
    upload_timeout: float = 30.0  # seconds

    model_config = SettingsConfigDict(
        env_prefix="UPLOADER_",
        env_file=".env",
        env_file_encoding="utf-8",
        yaml_file=DEFAULT_CONFIG_FILE,
        case_sensitive=False,
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Environment beats the YAML file; explicit arguments beat both."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value: Union[str, List[str], None]) -> List[str]:
        """Accept ``tagA,tagB`` from the environment as well as YAML lists."""
        if value is None:
            return []
        if isinstance(value, str):
            return [t.strip() for t in value.split(',') if t.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        return check_log_level(value)

    @field_validator("paperless_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip('/')

    def disposition_policy(self) -> DispositionPolicy:
        """Build the post-upload policy from the configured action."""
        return DispositionPolicy(
            action=self.post_upload_action,
            processed_folder=self.processed_folder,
        )


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Load settings once at startup.

    Args:
        config_file: YAML file to read; defaults to ``config.yaml`` in the
            working directory. A missing file leaves the defaults in place.

    Returns:
        Settings instance

    Raises:
        ConfigError: If the file cannot be parsed or a value is invalid
    """
    settings_cls = Settings
    if config_file is not None:
        class FileSettings(Settings):
            model_config = SettingsConfigDict(yaml_file=Path(config_file))

        settings_cls = FileSettings

    try:
        return settings_cls()
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from e
    except (OSError, yaml.YAMLError, SettingsError) as e:
        raise ConfigError(f"failed to read configuration: {e}") from e


def write_example_config(path: Path = DEFAULT_CONFIG_FILE, force: bool = False) -> bool:
    """
    Write an example configuration file.

    Args:
        path: Destination file
        force: Overwrite an existing file

    Returns:
        True if an existing file was overwritten

    Raises:
        ConfigError: If the file exists and ``force`` is not set, or writing fails
    """
    existed = path.exists()
    if existed and not force:
        raise ConfigError(f"{path} already exists. Use --force to overwrite")

    try:
        path.write_text(EXAMPLE_CONFIG, encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"failed to write config file: {e}") from e

    return existed
