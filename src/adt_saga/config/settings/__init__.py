"""Config settings – env-based configuration."""
from adt_saga.config.settings.adt import AdtSettings
from adt_saga.config.settings.base import Settings
from adt_saga.config.settings.loaders import DotenvSettingsLoader, EnvSettingsLoader, SettingsLoader

__all__ = ["AdtSettings", "DotenvSettingsLoader", "EnvSettingsLoader", "Settings", "SettingsLoader"]
