"""
Configuration module for html2json.

Uses Pydantic models for validation and parsing of configuration files.
"""

import json
import logging
from pathlib import Path
from typing import Literal, Union

from pydantic import BaseModel, Field, ConfigDict

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class FetchConfig(BaseModel):
    """Configuration for document acquisition."""
    timeout: float = 30.0
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="userAgent")
    max_document_size: int = Field(100_000_000, alias="maxDocumentSize")
    render: bool = False  # fetch URLs through a headless browser

    model_config = ConfigDict(populate_by_name=True)


class Config(BaseModel):
    """Main configuration class."""
    parser: Literal["lxml", "xml", "html.parser"] = "lxml"
    max_spec_size: int = Field(1_048_576, alias="maxSpecSize")
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    model_config = ConfigDict(populate_by_name=True)


def load_config(config_path: Union[str, Path]) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Path to configuration file

    Returns:
        Validated configuration object
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    logger.info(f"Loading configuration from: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    config = Config.model_validate(data)

    logger.debug(f"Using parser '{config.parser}', render={config.fetch.render}")

    return config
