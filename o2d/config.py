# o2d/config.py
"""
Centralized Configuration Management

Version: 1.0.0
Features:
- Support both local (.env) and Streamlit Cloud (secrets.toml)
- Singleton pattern for efficiency
- Type-safe getters with defaults
- Environment detection
"""

import os
import logging
from pathlib import Path
from dotenv import load_dotenv
from typing import Dict, Any, Optional
from dataclasses import dataclass

# Initialize logger
logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "http://localhost:3006"


def is_running_on_streamlit_cloud() -> bool:
    """Detect if running on Streamlit Cloud"""
    try:
        import streamlit as st
        return hasattr(st, 'secrets') and len(st.secrets) > 0
    except Exception:
        return False


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class ApiConfig:
    """Backend API configuration container"""
    base_url: str = DEFAULT_API_BASE_URL
    auth_base_url: Optional[str] = None
    timeout_seconds: int = 15

    def __post_init__(self):
        self.base_url = (self.base_url or DEFAULT_API_BASE_URL).rstrip('/')
        self.auth_base_url = (self.auth_base_url or self.base_url).rstrip('/')

    def to_dict(self) -> Dict[str, Any]:
        return {
            'base_url': self.base_url,
            'auth_base_url': self.auth_base_url,
            'timeout_seconds': self.timeout_seconds,
        }


class Config:
    """
    Centralized configuration management

    Usage:
        from o2d.config import config

        # Get API config
        api_config = config.get_api_config()

        # Get app settings
        interval = config.get_app_setting("DASHBOARD_REFRESH_SECONDS", 300)
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self.is_cloud = is_running_on_streamlit_cloud()
        self._load_config()
        self._initialized = True

    def _load_config(self):
        """Load configuration based on environment"""
        if self.is_cloud:
            settings = self._read_cloud_settings()
        else:
            settings = self._read_local_settings()

        self._api_config = ApiConfig(
            base_url=settings.get("API_BASE_URL") or DEFAULT_API_BASE_URL,
            auth_base_url=settings.get("AUTH_BASE_URL"),
            timeout_seconds=_as_int(settings.get("REQUEST_TIMEOUT_SECONDS"), 15),
        )
        self._load_app_config(settings)
        self._log_config_status()

    def _read_cloud_settings(self) -> Dict[str, Any]:
        """Read settings from Streamlit Cloud secrets"""
        import streamlit as st

        settings: Dict[str, Any] = {}
        settings.update(dict(st.secrets.get("API", {})))
        settings.update(dict(st.secrets.get("APP", {})))

        logger.info("☁️ Running in STREAMLIT CLOUD")
        return settings

    def _read_local_settings(self) -> Dict[str, Any]:
        """Read settings from local .env file and process environment"""
        env_paths = [
            Path.cwd() / ".env",
            Path(__file__).parent.parent / ".env",
        ]

        for env_path in env_paths:
            if env_path.exists():
                load_dotenv(env_path)
                logger.info(f"Loaded .env from: {env_path}")
                break

        keys = [
            "API_BASE_URL", "AUTH_BASE_URL", "REQUEST_TIMEOUT_SECONDS",
            "SESSION_TIMEOUT_HOURS", "DASHBOARD_REFRESH_SECONDS", "TIMEZONE",
            "REPORT_ROW_LIMIT", "TOP_N", "LOG_LEVEL",
        ]

        logger.info("💻 Running in LOCAL environment")
        return {key: os.getenv(key) for key in keys if os.getenv(key) is not None}

    def _load_app_config(self, settings: Dict[str, Any]):
        """Load application-specific settings"""
        self._app_config = {
            # Session
            "SESSION_TIMEOUT_HOURS": _as_int(settings.get("SESSION_TIMEOUT_HOURS"), 8),

            # Dashboard
            "DASHBOARD_REFRESH_SECONDS": _as_int(settings.get("DASHBOARD_REFRESH_SECONDS"), 300),
            "REPORT_ROW_LIMIT": _as_int(settings.get("REPORT_ROW_LIMIT"), 100),
            "TOP_N": _as_int(settings.get("TOP_N"), 10),

            # Localization
            "TIMEZONE": settings.get("TIMEZONE") or "Asia/Kolkata",

            # Logging
            "LOG_LEVEL": str(settings.get("LOG_LEVEL") or "INFO").upper(),
        }

    def _log_config_status(self):
        """Log configuration status"""
        logger.info(f"✅ API: {self._api_config.base_url}")
        logger.info(f"✅ Auth API: {self._api_config.auth_base_url}")

    # ==================== PUBLIC GETTERS ====================

    def get_api_config(self) -> ApiConfig:
        """Get backend API configuration"""
        return self._api_config

    def get_app_setting(self, key: str, default: Any = None) -> Any:
        """Get application setting with default"""
        return self._app_config.get(key, default)


# ==================== SINGLETON INSTANCE ====================

config = Config()

__all__ = [
    'config',
    'Config',
    'ApiConfig',
    'DEFAULT_API_BASE_URL',
]
