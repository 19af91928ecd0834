"""Configuration settings for the lesson bot."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Define base directory
BASE_DIR = Path(__file__).parent.parent.parent

# Load environment variables from .env file
env_file = ".env.test" if os.getenv("ENV") == "test" else ".env"
load_dotenv(env_file)


# Define data directories from environment variables
DATA_DIR = Path(os.getenv("DATA_DIR", "./data"))
MEDIA_DIR = DATA_DIR / "media"
PRONUNCIATIONS_DIR = MEDIA_DIR / "pronunciations"

# Backend endpoints
DEFAULT_API_BASE_URL = "http://localhost:3000"
LESSON_PATH = "/api/units/{unit_id}/lesson"
COMPLETE_PATH = "/api/units/{unit_id}/complete"


def ensure_directories() -> None:
    """Ensure all required directories exist."""
    directories = [
        DATA_DIR,
        MEDIA_DIR,
        PRONUNCIATIONS_DIR,
    ]

    for directory in directories:
        directory.mkdir(parents=True, exist_ok=True)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("1", "true", "yes")


@dataclass
class PathSettings:
    """Path configuration settings."""
    base_dir: Path = BASE_DIR
    data_dir: Path = DATA_DIR
    media_dir: Path = MEDIA_DIR
    pronunciations_dir: Path = PRONUNCIATIONS_DIR


@dataclass
class LoggingSettings:
    """Logging configuration settings."""
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    dir: Optional[str] = os.getenv("LOG_DIR", None)
    rotation: str = os.getenv("LOG_ROTATION", "midnight")
    interval: int = int(os.getenv("LOG_INTERVAL", "1"))
    backup_count: int = int(os.getenv("LOG_BACKUP_COUNT", "7"))


@dataclass
class BotSettings:
    """Bot configuration settings."""
    token: str = os.getenv("TELEGRAM_BOT_TOKEN", "")

    def require_token(self) -> str:
        """Return the bot token or raise if it is not configured."""
        if not self.token:
            raise ValueError("TELEGRAM_BOT_TOKEN is required")
        return self.token


@dataclass
class ApiSettings:
    """Lesson backend settings."""
    base_url: str = os.getenv("VOCABMASTER_API_URL", DEFAULT_API_BASE_URL)
    lesson_path: str = os.getenv("VOCABMASTER_LESSON_PATH", LESSON_PATH)
    complete_path: str = os.getenv("VOCABMASTER_COMPLETE_PATH", COMPLETE_PATH)
    timeout: float = float(os.getenv("VOCABMASTER_HTTP_TIMEOUT", "10"))


@dataclass
class SpeechSettings:
    """Pronunciation playback settings."""
    enabled: bool = _env_flag("VOCABMASTER_SPEECH_ENABLED", "true")
    language: str = os.getenv("VOCABMASTER_SPEECH_LANGUAGE", "en")


@dataclass
class SessionSettings:
    """Lesson session settings."""
    strict: bool = _env_flag("VOCABMASTER_STRICT_SESSIONS")


@dataclass
class MonitoringSettings:
    """Prometheus exporter settings."""
    enabled: bool = _env_flag("VOCABMASTER_METRICS_ENABLED")
    port: int = int(os.getenv("VOCABMASTER_METRICS_PORT", "9090"))


def get_path_settings() -> PathSettings:
    """Get path settings."""
    return PathSettings()


def get_logging_settings() -> LoggingSettings:
    """Get logging settings."""
    return LoggingSettings()


def get_bot_settings() -> BotSettings:
    """Get bot settings."""
    return BotSettings()


def get_api_settings() -> ApiSettings:
    """Get lesson backend settings."""
    return ApiSettings()


def get_speech_settings() -> SpeechSettings:
    """Get speech settings."""
    return SpeechSettings()


def get_session_settings() -> SessionSettings:
    """Get session settings."""
    return SessionSettings()


def get_monitoring_settings() -> MonitoringSettings:
    """Get monitoring settings."""
    return MonitoringSettings()


@dataclass
class Settings:
    """Main settings class that combines all configuration settings."""
    paths: PathSettings = field(default_factory=get_path_settings)
    logging: LoggingSettings = field(default_factory=get_logging_settings)
    bot: BotSettings = field(default_factory=get_bot_settings)
    api: ApiSettings = field(default_factory=get_api_settings)
    speech: SpeechSettings = field(default_factory=get_speech_settings)
    session: SessionSettings = field(default_factory=get_session_settings)
    monitoring: MonitoringSettings = field(default_factory=get_monitoring_settings)

    def validate(self) -> None:
        """Validate settings and raise ValueError if invalid."""
        if not self.api.base_url:
            raise ValueError("VOCABMASTER_API_URL is required")

        if self.api.timeout <= 0:
            raise ValueError("VOCABMASTER_HTTP_TIMEOUT must be positive")

        for name, template in (("VOCABMASTER_LESSON_PATH", self.api.lesson_path),
                               ("VOCABMASTER_COMPLETE_PATH", self.api.complete_path)):
            if "{unit_id}" not in template:
                raise ValueError(f"{name} must contain the {{unit_id}} placeholder")

        if not 0 < self.monitoring.port < 65536:
            raise ValueError("VOCABMASTER_METRICS_PORT must be between 1 and 65535")


# Create global settings instance
settings = Settings()
settings.validate()
