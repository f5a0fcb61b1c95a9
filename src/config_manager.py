#!/usr/bin/env python3
"""
Configuration Manager for the attestor registry tools

Supports multiple registry profiles with:
1. Environment variable substitution (${VAR} patterns)
2. Configuration validation
3. Per-profile data directories
"""

import os
import json
import re
from typing import Dict, Any, Optional
from pathlib import Path

from dotenv import load_dotenv

# look for .env file in the repository root
load_dotenv(Path(__file__).parent.parent / '.env')

ADDRESS_PATTERN = re.compile(r'^0x[0-9a-fA-F]{40}$')


class ConfigManager:
    """Configuration manager supporting multiple registry profiles"""

    def __init__(self, config_file: Optional[str] = None, config_name_override: Optional[str] = None):
        self.config_file = config_file or os.getenv('ATTESTOR_CONFIG_FILE') or "config.json"
        self._config_data = None
        self._active_config_name = None
        self._active_config = None
        self._config_name_override = config_name_override
        self._load_config()
        self._load_active_config()

    def _resolve_config_path(self) -> Path:
        path = Path(self.config_file)
        if path.is_absolute() or path.exists():
            return path
        return Path(__file__).parent.parent / self.config_file

    def _load_config(self):
        """Load configuration from JSON file"""
        config_path = self._resolve_config_path()

        try:
            with open(config_path, 'r') as f:
                content = f.read()
                # substitute environment variables
                content = self._substitute_env_vars(content)
                self._config_data = json.loads(content)
        except FileNotFoundError:
            raise FileNotFoundError(f"Config file {config_path} not found")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}")

    def _substitute_env_vars(self, content: str) -> str:
        """Substitute ${VAR} patterns with environment variables"""
        def replace_var(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            if env_value is None:
                raise ValueError(f"Environment variable {var_name} is not set")
            return env_value

        pattern = r'\$\{([A-Z_][A-Z0-9_]*)\}'
        return re.sub(pattern, replace_var, content)

    def _load_active_config(self):
        """Pick the active profile from the override, ACTIVE_CONFIG, or the first profile"""
        if self._config_name_override:
            self._active_config_name = self._config_name_override
        else:
            self._active_config_name = os.getenv('ACTIVE_CONFIG')

        if not self._active_config_name:
            configs = self.get_available_configs()
            if configs:
                self._active_config_name = list(configs.keys())[0]
            else:
                raise ValueError("No configurations available and ACTIVE_CONFIG not set")

        if self._active_config_name not in self.get_available_configs():
            available = list(self.get_available_configs().keys())
            raise ValueError(f"Active config '{self._active_config_name}' not found. Available: {available}")

        self._active_config = self.get_available_configs()[self._active_config_name]

        os.makedirs(self.get_data_dir(), exist_ok=True)

    def get_available_configs(self) -> Dict[str, Any]:
        return self._config_data.get("configs", {})

    def get_active_config_name(self) -> str:
        return self._active_config_name

    def get_active_config(self) -> Dict[str, Any]:
        return self._active_config.copy()

    def list_configs(self) -> Dict[str, str]:
        """List all available configurations with display names"""
        configs = {}
        for name, config in self.get_available_configs().items():
            configs[name] = config.get('display_name', name)
        return configs

    def switch_config(self, config_name: str):
        if config_name not in self.get_available_configs():
            available = list(self.get_available_configs().keys())
            raise ValueError(f"Config '{config_name}' not found. Available: {available}")

        self._config_name_override = config_name
        self._load_active_config()
        return True

    def validate_config(self, config_name: Optional[str] = None) -> Dict[str, Any]:
        """Validate a configuration and return validation results"""
        config = self.get_available_configs().get(config_name or self._active_config_name)

        if not config:
            return {"valid": False, "errors": ["Configuration not found"], "warnings": [],
                    "config_name": config_name or self._active_config_name}

        errors = []
        warnings = []

        if 'data_dir' not in config:
            errors.append("Missing required field: data_dir")

        if not config.get('owner'):
            warnings.append("owner not set; 'init' will need --owner")

        address = config.get('default_attestor_address')
        if address is None:
            warnings.append("default_attestor_address not set; 'init' will need --address")
        elif not ADDRESS_PATTERN.match(address):
            errors.append("default_attestor_address must be a valid Ethereum address (0x + 40 hex chars)")

        url = config.get('default_attestor_url')
        if url and not url.startswith(('http://', 'https://')):
            warnings.append("default_attestor_url should be an HTTP/HTTPS URL")

        store = self._config_data.get('store', {})
        if not isinstance(store.get('lock_retries', 8), int) or store.get('lock_retries', 8) < 1:
            errors.append("store.lock_retries must be a positive integer")

        return {
            "valid": len(errors) == 0,
            "errors": errors,
            "warnings": warnings,
            "config_name": config_name or self._active_config_name
        }

    # configuration getters using active config

    def get_data_dir(self) -> str:
        return self._active_config['data_dir']

    def get_display_name(self) -> str:
        return self._active_config.get('display_name', self._active_config_name)

    def get_registry_path(self) -> str:
        return self._active_config.get('registry_path', f"{self.get_data_dir()}/registry.json")

    def get_events_file(self) -> str:
        return self._active_config.get('events_file', f"{self.get_data_dir()}/registry_events.csv")

    def get_owner(self) -> Optional[str]:
        return self._active_config.get('owner')

    def get_default_attestor_address(self) -> Optional[str]:
        return self._active_config.get('default_attestor_address')

    def get_default_attestor_url(self) -> str:
        return self._active_config.get('default_attestor_url', '')

    def get_store_config(self) -> Dict[str, Any]:
        return self._config_data.get("store", {})

    def get_lock_retries(self) -> int:
        return self.get_store_config().get('lock_retries', 8)

    def get_lock_base_delay(self) -> float:
        return self.get_store_config().get('lock_base_delay', 0.1)


# Global configuration manager instance
_config_manager_instance = None


def get_config_manager() -> ConfigManager:
    """
    Get the global configuration manager instance (singleton pattern)
    """
    global _config_manager_instance

    if _config_manager_instance is None:
        _config_manager_instance = ConfigManager()

    return _config_manager_instance


def reset_config_manager_instance(config_name_override: Optional[str] = None,
                                  config_file: Optional[str] = None):
    """
    Reset the global configuration manager instance with optional config override
    """
    global _config_manager_instance
    _config_manager_instance = ConfigManager(config_file=config_file, config_name_override=config_name_override)
    return _config_manager_instance
