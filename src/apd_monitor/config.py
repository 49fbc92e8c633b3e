import json
import os
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError, field_validator


class ConfigError(Exception):
    """Raised when the configuration is missing or invalid"""


# Numeric chat id, or @username of a public channel
ChatId = Union[int, str]


class FirstRunPolicy(str, Enum):
    """What to do with the offers found on the very first poll"""
    SILENT = "silent"
    SEND_ALL = "send_all"


class FilterConfig(BaseModel):
    """Query filters sent to the APD listing API"""
    rows: int = Field(default=100, gt=0, description="Maximum number of offers per request")
    district: str = Field(default="general pueyrredon", description="District name (descdistrito)")
    status: str = Field(default="Publicada", description="Offer status (estado)")


class AppConfig(BaseModel):
    """Application configuration"""

    bot_token: str = Field(description="Telegram Bot Token")
    chat_id: Optional[ChatId] = Field(
        default=None,
        description="Default recipient, always notified in addition to subscribers"
    )
    admin_chat_id: Optional[ChatId] = Field(
        default=None,
        description="Admin chat ID for receiving alerts"
    )

    filters: FilterConfig = Field(default_factory=FilterConfig)

    api_url: str = Field(
        default="https://servicios3.abc.gob.ar/valoracion.docente/api/apd.oferta.encabezado/select",
        description="APD offer listing endpoint"
    )
    request_timeout: int = Field(
        default=30,
        gt=0,
        description="HTTP timeout in seconds for the listing API"
    )
    fetch_interval_minutes: int = Field(
        default=30,
        gt=0,
        description="Poll interval in minutes"
    )
    first_run_policy: FirstRunPolicy = Field(
        default=FirstRunPolicy.SILENT,
        description="silent: only record offers on first run; send_all: announce all of them"
    )
    omit_specific_time: bool = Field(
        default=False,
        description="Show only the date for closing times at the upstream midnight marker"
    )
    alert_threshold: int = Field(
        default=5,
        gt=0,
        description="Consecutive fetch failures before alerting the admin"
    )
    web_port: int = Field(default=3000, description="Port of the liveness endpoint")

    @field_validator("chat_id", "admin_chat_id", mode="before")
    @classmethod
    def parse_chat_id(cls, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        value = value.strip()
        if not value:
            return None
        if value.lstrip("-").isdigit():
            return int(value)
        if not value.startswith("@") or len(value) == 1:
            raise ValueError("chat id must be numeric or a @channel username")
        return value

    @field_validator("bot_token")
    @classmethod
    def token_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("bot_token must not be empty")
        return value.strip()


# Environment variable → dotted config path
ENV_MAPPING = {
    "BOT_TOKEN": "bot_token",
    "CHAT_ID": "chat_id",
    "ADMIN_CHAT_ID": "admin_chat_id",
    "ROWS": "filters.rows",
    "DISTRITO": "filters.district",
    "ESTADO": "filters.status",
    "API_URL": "api_url",
    "REQUEST_TIMEOUT": "request_timeout",
    "FETCH_INTERVAL": "fetch_interval_minutes",
    "FIRST_RUN_POLICY": "first_run_policy",
    "OMIT_SPECIFIC_TIME": "omit_specific_time",
    "ALERT_THRESHOLD": "alert_threshold",
    "PORT": "web_port",
}


class ConfigManager:
    """Loads configuration from config.json and the environment"""

    CONFIG_FILE = "config.json"
    ENV_FILE = ".env"
    STATE_FILE = "estado_ofertas.json"
    SUBSCRIBERS_FILE = "suscriptores.json"

    def __init__(self, config_dir: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None):
        # Default to current working directory
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()
        self.config_path = self.config_dir / self.CONFIG_FILE
        self.env_path = self.config_dir / self.ENV_FILE
        self.state_path = self.config_dir / self.STATE_FILE
        self.subscribers_path = self.config_dir / self.SUBSCRIBERS_FILE
        self.environ = os.environ if environ is None else environ

    def exists(self) -> bool:
        """Check if configuration file exists"""
        return self.config_path.exists()

    def load_raw(self) -> Dict[str, Any]:
        """Load raw configuration as dict (empty when there is no file)"""
        if not self.config_path.exists():
            return {}
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"{self.config_path} must contain a JSON object")
        return data

    def load_env(self) -> Dict[str, Optional[str]]:
        """Environment variables, falling back to the .env file next to config.json"""
        env: Dict[str, Optional[str]] = {}
        if self.env_path.exists():
            env.update(dotenv_values(self.env_path))
        # Non-empty real environment variables win over .env
        env.update({name: value for name, value in self.environ.items() if value and value.strip()})
        return env

    def _apply_env(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Overlay non-empty environment variables on top of file values"""
        env = self.load_env()
        for env_name, path in ENV_MAPPING.items():
            value = env.get(env_name)
            if value is None or value.strip() == "":
                continue
            target = data
            *parents, key = path.split(".")
            for parent in parents:
                target = target.setdefault(parent, {})
            target[key] = value.strip()
        return data

    def load(self) -> AppConfig:
        """Load and validate configuration

        Raises:
            ConfigError: when the token is missing or a value is invalid
        """
        data = self._apply_env(self.load_raw())
        if not data.get("bot_token"):
            raise ConfigError("BOT_TOKEN must be defined in the environment or config.json")
        try:
            return AppConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def save(self, config: AppConfig) -> None:
        """Save configuration to file"""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            # Only save non-None fields
            data = config.model_dump(mode="json", exclude_none=True)
            json.dump(data, f, indent=2, ensure_ascii=False)
