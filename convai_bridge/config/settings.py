"""
Process-wide settings loaded once at startup.

Settings are read from the environment (optionally seeded from a ``.env`` file)
into a frozen model that is handed to every component that needs credentials
or endpoints. Nothing reads the environment after startup.
"""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

import dotenv
from pydantic import BaseModel, ConfigDict

from convai_bridge.config.constants import DEFAULT_SIGNED_URL_ENDPOINT
from convai_bridge.exceptions import ConfigurationError

REQUIRED_VARIABLES = (
    "ELEVENLABS_API_KEY",
    "ELEVENLABS_AGENT_ID",
    "TWILIO_ACCOUNT_SID",
    "TWILIO_AUTH_TOKEN",
    "TWILIO_PHONE_NUMBER",
)


class Settings(BaseModel):
    """Immutable configuration shared by all sessions."""

    model_config = ConfigDict(frozen=True)

    elevenlabs_api_key: str
    elevenlabs_agent_id: str
    twilio_account_sid: str
    twilio_auth_token: str
    twilio_phone_number: str
    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "INFO"
    signed_url_endpoint: str = DEFAULT_SIGNED_URL_ENDPOINT
    signed_url_timeout: float = 10.0

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from, defaults to ``os.environ``

        Raises:
            ConfigurationError: If a required variable is missing or a value is malformed
        """
        env = os.environ if environ is None else environ

        missing = [name for name in REQUIRED_VARIABLES if not env.get(name, "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        values: Dict[str, object] = {
            name.lower(): env[name].strip() for name in REQUIRED_VARIABLES
        }

        try:
            if env.get("PORT"):
                values["port"] = int(env["PORT"])
            if env.get("SIGNED_URL_TIMEOUT"):
                values["signed_url_timeout"] = float(env["SIGNED_URL_TIMEOUT"])
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        if env.get("HOST"):
            values["host"] = env["HOST"]
        if env.get("LOG_LEVEL"):
            values["log_level"] = env["LOG_LEVEL"].upper()
        if env.get("ELEVENLABS_SIGNED_URL_ENDPOINT"):
            values["signed_url_endpoint"] = env["ELEVENLABS_SIGNED_URL_ENDPOINT"]

        return cls(**values)


def load_settings(env_file: Path = Path(".") / ".env") -> Settings:
    """Load a ``.env`` file if present, then build settings from the environment."""
    if env_file.exists():
        dotenv.load_dotenv(env_file)
    return Settings.from_env()
