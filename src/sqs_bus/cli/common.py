"""Helpers shared by the sqs_bus CLIs."""

import os

import click
import dotenv

from sqs_bus.config import Settings, get_settings
from sqs_bus.errors import BusError, SecurityError


def load_settings(region: str | None = None, endpoint_url: str | None = None) -> Settings:
    """Load settings from the environment (and .env if present); CLI options win."""
    if os.path.exists(".env"):
        dotenv.load_dotenv()
    settings = get_settings()
    if region:
        settings.aws_region = region
    if endpoint_url:
        settings.aws_endpoint_url = endpoint_url
    return settings


def to_click_exception(error: BusError) -> click.ClickException:
    """Turn a connector error into a CLI error, calling out rejected credentials."""
    if isinstance(error, SecurityError):
        return click.ClickException(f"AWS rejected the credentials. {error}")
    return click.ClickException(str(error))
