"""Configuration module for memwatch."""

from .config_loader import ConfigLoader, build_monitor_config
from .monitor_config import MonitorConfig, ThresholdConfig

__all__ = ["ConfigLoader", "MonitorConfig", "ThresholdConfig", "build_monitor_config"]
