"""
Configuration Manager.

Persists the backend connection and UI preferences between runs. The backend
token never touches the JSON file; it lives in the OS keyring.
"""

import os
import copy
import json
import shutil
import keyring
from keyring.errors import PasswordDeleteError
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from printer_buddy.utils.logger import log


class ConfigManager:
    """
    JSON-backed settings with dot-notation access.

    Missing sections or keys are filled from DEFAULT_CONFIG on load, so an
    older or hand-edited file keeps working.
    """

    APP_NAME = "PrintDecisionBuddy"
    CONFIG_DIR = os.environ.get(
        "PRINT_BUDDY_HOME",
        os.path.join(os.path.expanduser("~"), ".print_decision_buddy"),
    )
    CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")

    API_TOKEN_KEY = "PRINT_BUDDY_API_TOKEN"

    DEFAULT_CONFIG = {
        "api": {
            "base_url": "http://localhost:8000",
            "timeout_seconds": 15,
        },
        "preferences": {
            "theme": "Dark",
            "appearance_scale": 1.0,
        },
        "updated_at": None,
    }

    def __init__(self, config_dir: Optional[str] = None):
        if config_dir is not None:
            self.CONFIG_DIR = config_dir
            self.CONFIG_FILE = os.path.join(config_dir, "config.json")
        os.makedirs(self.CONFIG_DIR, exist_ok=True)
        self.config = self.load_config()
        self.save_config()

    def load_config(self) -> Dict[str, Any]:
        """Read the config file, falling back to defaults if absent or unreadable."""
        stored: Dict[str, Any] = {}
        if os.path.exists(self.CONFIG_FILE):
            try:
                with open(self.CONFIG_FILE, 'r', encoding='utf-8') as f:
                    stored = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                log.error(f"Failed to load config: {e}. Using defaults.")
            if not isinstance(stored, dict):
                log.error("Config file does not hold an object. Using defaults.")
                stored = {}
        self.config = self._with_defaults(stored, self.DEFAULT_CONFIG)
        return self.config

    @classmethod
    def _with_defaults(cls, stored: Dict[str, Any], defaults: Dict[str, Any]) -> Dict[str, Any]:
        merged = copy.deepcopy(stored)
        for key, default in defaults.items():
            if isinstance(default, dict):
                section = stored.get(key)
                merged[key] = cls._with_defaults(section if isinstance(section, dict) else {}, default)
            elif key not in merged:
                merged[key] = default
        return merged

    def save_config(self) -> None:
        """Write the config, keeping the previous file as ``config.json.bak``."""
        self.config["updated_at"] = datetime.now(timezone.utc).isoformat()

        if os.path.exists(self.CONFIG_FILE):
            try:
                shutil.copy2(self.CONFIG_FILE, self.CONFIG_FILE + ".bak")
            except IOError as e:
                log.warning(f"Failed to backup config: {e}")

        try:
            with open(self.CONFIG_FILE, 'w', encoding='utf-8') as f:
                json.dump(self.config, f, indent=2)
        except IOError as e:
            log.error(f"Failed to save config: {e}")

    # =========================================================================
    # Dot-notation access
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """Look up ``"api.base_url"`` style keys; ``default`` if any part is missing."""
        value: Any = self.config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> None:
        """Assign a dot-notation key, creating sections as needed, and save."""
        *sections, leaf = key.split(".")
        target = self.config
        for part in sections:
            target = target.setdefault(part, {})
        target[leaf] = value
        self.save_config()

    # =========================================================================
    # Backend API
    # =========================================================================

    def get_api_base_url(self) -> str:
        """Backend base URL without a trailing slash."""
        url = self.get("api.base_url") or self.DEFAULT_CONFIG["api"]["base_url"]
        return url.rstrip("/")

    def set_api_base_url(self, url: str) -> None:
        self.set("api.base_url", url.rstrip("/"))

    def get_api_timeout(self) -> float:
        """Request timeout in seconds. Invalid values fall back to the default."""
        timeout = self.get("api.timeout_seconds")
        default = self.DEFAULT_CONFIG["api"]["timeout_seconds"]
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
            if timeout is not None:
                log.warning(f"Invalid api.timeout_seconds {timeout!r}, using {default}s")
            return float(default)
        return float(timeout)

    # =========================================================================
    # Keyring
    # =========================================================================

    def get_secure(self, key: str) -> str:
        """Keyring value for ``key``, or empty string when unset or unavailable."""
        try:
            return keyring.get_password(self.APP_NAME, key) or ""
        except Exception as e:
            log.error(f"Keyring get error for {key}: {e}")
            return ""

    def set_secure(self, key: str, value: str) -> None:
        """Store ``value`` in the keyring; an empty value removes the entry."""
        try:
            if value:
                keyring.set_password(self.APP_NAME, key, value)
                return
            keyring.delete_password(self.APP_NAME, key)
        except PasswordDeleteError:
            log.debug(f"No stored value for {key} to delete")
        except Exception as e:
            log.error(f"Keyring set error for {key}: {e}")

    def get_api_token(self) -> str:
        """Bearer token for the backend, or empty string when none is stored."""
        return self.get_secure(self.API_TOKEN_KEY)


config_manager = ConfigManager()
