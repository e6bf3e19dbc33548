"""Configuration loader and validation for enrichment settings."""

from pathlib import Path
from typing import Any, Literal, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class BankConfig(BaseModel):
    """Configuration for the bank's web endpoints."""

    base_url: str = "https://digital.bankaust.com.au/platform.axd"
    listing_path: str = "transaction/GetTransactionHistory"
    payment_path: str = "npp/GetPayment"
    export_path: str = "transaction/ExportToOfx"
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:144.0) "
        "Gecko/20100101 Firefox/144.0"
    )
    timeout_seconds: float = 30.0


class EnrichmentConfig(BaseModel):
    """Configuration for reference lookups and memo rewriting."""

    wave_size: int = 10
    decoder: Literal["structured", "regex"] = "structured"
    memo_prefix: str = "Osko Payment From "
    separator: str = " - "

    @field_validator("wave_size")
    @classmethod
    def _positive_wave(cls, value: int) -> int:
        if value < 1:
            raise ValueError("wave_size must be a positive integer")
        return value


class OutputConfig(BaseModel):
    """Configuration for written artifacts."""

    filename_template: str = "bankAustralia-{month:02d}-{year}.ofx"
    original_suffix: str = "-original"
    keep_original: bool = False
    diagnostics_dir: Optional[str] = None


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class EnricherConfig(BaseModel):
    """Main configuration model."""

    bank: BankConfig = Field(default_factory=BankConfig)
    enrichment: EnrichmentConfig = Field(default_factory=EnrichmentConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return {
        "bank": BankConfig().model_dump(),
        "enrichment": EnrichmentConfig().model_dump(),
        "output": OutputConfig().model_dump(),
        "logging": LoggingConfig().model_dump(),
    }


def load_config(config_path: Optional[Path] = None) -> EnricherConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        EnricherConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file cannot be parsed or holds invalid values
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(f"Configuration root must be a mapping: {config_path}")

        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return EnricherConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    yaml_content = """# OFX Enricher Configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(get_default_config(), default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
