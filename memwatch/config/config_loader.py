"""
Configuration loader for memwatch.

Settings come from three layers, later layers overriding earlier ones:
built-in defaults, an optional YAML file (plus an environment-specific
override file next to it), and explicit command-line flags.
"""
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from memwatch.config.monitor_config import (
    DEFAULT_CHECK_INTERVAL_MS,
    DEFAULT_THRESHOLD_ABSOLUTE_KIB,
    DEFAULT_THRESHOLD_RELATIVE,
    MAX_REPORT_EVERY_NTH,
    MonitorConfig,
    ThresholdConfig,
)
from memwatch.errors import ConfigError
from memwatch.util.units import kib_to_bytes

DEFAULT_SETTINGS: Dict[str, Any] = {
    "out": None,
    "threshold_absolute": DEFAULT_THRESHOLD_ABSOLUTE_KIB,
    "threshold_relative": DEFAULT_THRESHOLD_RELATIVE,
    "check_interval": DEFAULT_CHECK_INTERVAL_MS,
    "report_every_nth": None,
    "show_free": False,
    "show_command": False,
}


def env_config_path(config_file: Path, env: str) -> Path:
    """config.yaml + "ci" -> config_ci.yaml"""
    return config_file.with_name(f"{config_file.stem}_{env}{config_file.suffix}")


class ConfigLoader:

    def __init__(self, config_file: Optional[Path] = None, env: Optional[str] = None):
        self.config_file = config_file
        self.env = env
        self.settings = self._load_settings()

    def _load_settings(self) -> Dict[str, Any]:
        """
        Load settings from the YAML file, if any.
        Supports environment-specific overrides via <stem>_<env>.yaml

        Returns:
            Dict of recognised settings found in the file(s)
        """
        if self.config_file is None:
            if self.env:
                raise ConfigError("--env requires --config")
            return {}

        data = self._read_yaml(self.config_file)

        if self.env:
            env_data = self._read_yaml(env_config_path(self.config_file, self.env))
            # dict.update() will overwrite existing keys
            data.update(env_data)

        unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
        if unknown:
            raise ConfigError(f"Unknown setting(s) in {self.config_file}: {', '.join(unknown)}")

        return data

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return {str(key).replace("-", "_"): value for key, value in data.items()}

    def build(self, overrides: Optional[Dict[str, Any]] = None) -> MonitorConfig:
        """
        Merge defaults, file settings and explicit overrides into a MonitorConfig.

        Args:
            overrides: Settings given on the command line; None values are ignored

        Returns:
            MonitorConfig: validated configuration
        """
        merged = dict(DEFAULT_SETTINGS)
        merged.update(self.settings)
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value
        return build_monitor_config(merged)


def build_monitor_config(settings: Dict[str, Any]) -> MonitorConfig:
    threshold_absolute = _as_int(settings, "threshold_absolute")
    if threshold_absolute < 0:
        raise ConfigError("threshold_absolute must not be negative")

    threshold_relative = _as_float(settings, "threshold_relative")
    if threshold_relative < 0:
        raise ConfigError("threshold_relative must not be negative")

    check_interval = _as_int(settings, "check_interval")
    if check_interval <= 0:
        raise ConfigError("check_interval must be a positive number of milliseconds")

    report_every_nth = settings.get("report_every_nth")
    if report_every_nth is not None:
        report_every_nth = _as_int(settings, "report_every_nth")
        if not 0 <= report_every_nth <= MAX_REPORT_EVERY_NTH:
            raise ConfigError(f"report_every_nth must be between 0 and {MAX_REPORT_EVERY_NTH}")
        if report_every_nth == 0:
            report_every_nth = None

    out = settings.get("out")
    if out is not None:
        out = str(out)

    thresholds = ThresholdConfig(
        threshold_absolute_bytes=kib_to_bytes(threshold_absolute),
        threshold_relative=threshold_relative,
        check_interval=check_interval / 1000.0,
        report_every_nth=report_every_nth,
    )
    return MonitorConfig(
        thresholds=thresholds,
        out=out,
        show_free=bool(settings.get("show_free")),
        show_command=bool(settings.get("show_command")),
    )


def _as_int(settings: Dict[str, Any], key: str) -> int:
    value = settings.get(key)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from e


def _as_float(settings: Dict[str, Any], key: str) -> float:
    value = settings.get(key)
    if isinstance(value, bool):
        raise ConfigError(f"{key} must be a number, got {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {value!r}") from e
