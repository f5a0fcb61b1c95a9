#!/usr/bin/env python3
"""
Configuration access for the attestor CLI

Loads configuration from:
1. Environment variables (.env via python-dotenv, ACTIVE_CONFIG, ATTESTOR_CALLER)
2. config.json profiles (see ConfigManager)
3. CLI overrides (--config, --registry)
"""

from typing import Optional

import config_manager as _config_manager_module
from config_manager import ConfigManager, reset_config_manager_instance
from registry_events import CsvEventSink
from registry_store import RegistryStore


def set_global_config_override(config_name: str, config_file: Optional[str] = None) -> ConfigManager:
    """Make `config_name` the active profile for the rest of the process"""
    return reset_config_manager_instance(config_name_override=config_name, config_file=config_file)


def get_config_manager() -> ConfigManager:
    return _config_manager_module.get_config_manager()


def create_registry_store(config_manager: ConfigManager, registry_path: Optional[str] = None) -> RegistryStore:
    """Build the registry store for the active profile, publishing events to its CSV log"""
    return RegistryStore(
        registry_path or config_manager.get_registry_path(),
        sink=CsvEventSink(config_manager.get_events_file()),
        lock_retries=config_manager.get_lock_retries(),
        lock_base_delay=config_manager.get_lock_base_delay(),
    )
