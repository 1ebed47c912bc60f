"""
Configuration File Support for ZoneSweep.

Provides TOML-based configuration management:
- Default config location (~/.zonesweep/config.toml)
- Project-level config (.zonesweep.toml)
- Environment variable overrides
- Config validation and error messages
"""

import json
import os
import tomllib
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any, List


class ConfigError(Exception):
    """Configuration error."""
    pass


def _typed(data: Dict[str, Any], key: str, kind: type, default: Any = None) -> Any:
    """Fetch a config value, rejecting values of the wrong TOML type."""
    value = data.get(key, default)
    if value is None:
        return None
    if kind is float and isinstance(value, int) and not isinstance(value, bool):
        return float(value)
    if not isinstance(value, kind) or (kind is not bool and isinstance(value, bool)):
        raise ConfigError(
            f"Invalid type for {key}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _typed_list(data: Dict[str, Any], key: str, kind: type) -> List[Any]:
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, kind) for v in values):
        raise ConfigError(f"Invalid type for {key}: expected a list of {kind.__name__}")
    return list(values)


@dataclass
class ResolverSettings:
    """Nameserver resolution settings."""
    nameserver: Optional[str] = None
    port: int = 53
    timeout: float = 5.0
    resolv_conf: str = "/etc/resolv.conf"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolverSettings":
        """Create from dictionary."""
        return cls(
            nameserver=_typed(data, "nameserver", str),
            port=_typed(data, "port", int, 53),
            timeout=_typed(data, "timeout", float, 5.0),
            resolv_conf=_typed(data, "resolv_conf", str, "/etc/resolv.conf"),
        )


@dataclass
class TransferSettings:
    """Zone transfer settings."""
    port: int = 53
    timeout: Optional[float] = 30.0
    lifetime: Optional[float] = None
    keep_last_envelope: bool = False
    workers: int = 1

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TransferSettings":
        """Create from dictionary."""
        return cls(
            port=_typed(data, "port", int, 53),
            timeout=_typed(data, "timeout", float, 30.0),
            lifetime=_typed(data, "lifetime", float),
            keep_last_envelope=_typed(data, "keep_last_envelope", bool, False),
            workers=_typed(data, "workers", int, 1),
        )


@dataclass
class OutputSettings:
    """Output configuration."""
    formats: List[str] = field(default_factory=list)
    json_file: Optional[str] = None
    csv_file: Optional[str] = None
    text_file: Optional[str] = None
    verbose: bool = False
    color_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutputSettings":
        """Create from dictionary."""
        return cls(
            formats=_typed_list(data, "formats", str),
            json_file=_typed(data, "json_file", str),
            csv_file=_typed(data, "csv_file", str),
            text_file=_typed(data, "text_file", str),
            verbose=_typed(data, "verbose", bool, False),
            color_enabled=_typed(data, "color_enabled", bool, True),
        )


@dataclass
class AdvancedSettings:
    """Advanced configuration."""
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AdvancedSettings":
        """Create from dictionary."""
        return cls(
            log_level=_typed(data, "log_level", str, "WARNING"),
            log_file=_typed(data, "log_file", str),
        )


@dataclass
class ZoneSweepConfig:
    """
    Complete ZoneSweep configuration.

    Contains all configuration sections.
    """
    resolver: ResolverSettings = field(default_factory=ResolverSettings)
    transfer: TransferSettings = field(default_factory=TransferSettings)
    output: OutputSettings = field(default_factory=OutputSettings)
    advanced: AdvancedSettings = field(default_factory=AdvancedSettings)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "resolver": self.resolver.to_dict(),
            "transfer": self.transfer.to_dict(),
            "output": self.output.to_dict(),
            "advanced": self.advanced.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ZoneSweepConfig":
        """Create from dictionary."""
        return cls(
            resolver=ResolverSettings.from_dict(data.get("resolver", {})),
            transfer=TransferSettings.from_dict(data.get("transfer", {})),
            output=OutputSettings.from_dict(data.get("output", {})),
            advanced=AdvancedSettings.from_dict(data.get("advanced", {})),
        )

    def get_value(self, key_path: str) -> Any:
        """
        Get a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path (e.g., "transfer.timeout")

        Returns:
            Configuration value
        """
        obj: Any = self.to_dict()

        for part in key_path.split("."):
            if not isinstance(obj, dict) or part not in obj:
                raise KeyError(f"Configuration key not found: {key_path}")
            obj = obj[part]

        return obj

    def set_value(self, key_path: str, value: Any) -> None:
        """
        Set a configuration value by dot-separated path.

        Args:
            key_path: Dot-separated path (e.g., "transfer.timeout")
            value: Value to set, converted to the type of the current value
        """
        parts = key_path.split(".")
        if len(parts) != 2:
            raise ValueError(f"Invalid key path: {key_path}")

        section, key = parts
        if not hasattr(self, section):
            raise KeyError(f"Configuration section not found: {section}")

        section_obj = getattr(self, section)
        if not hasattr(section_obj, key):
            raise KeyError(f"Configuration key not found: {key_path}")

        current_value = getattr(section_obj, key)
        if section == "transfer" and key in ("timeout", "lifetime"):
            value = None if str(value).lower() in ("", "none") else float(value)
        elif isinstance(current_value, bool):
            value = _parse_bool(str(value))
        elif isinstance(current_value, int):
            value = int(value)
        elif isinstance(current_value, float):
            value = float(value)
        elif isinstance(current_value, list) and isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
        setattr(section_obj, key, value)


def _toml_str(value: str) -> str:
    # JSON string escapes are a subset of TOML basic string escapes
    return json.dumps(value)


def _parse_bool(value: str) -> bool:
    """Parse boolean from string."""
    return value.lower() in ("true", "1", "yes", "on")


def _parse_formats(value: str) -> List[str]:
    return [v.strip().lower() for v in value.split(",") if v.strip()]


class ConfigManager:
    """
    Configuration file manager.

    Handles loading and saving configuration from multiple sources:
    1. Built-in defaults
    2. User config (~/.zonesweep/config.toml)
    3. Project config (.zonesweep.toml)
    4. Environment variables (ZONESWEEP_*)
    5. CLI arguments (highest priority, applied by the caller)
    """

    DEFAULT_USER_CONFIG = Path.home() / ".zonesweep" / "config.toml"
    PROJECT_CONFIG_NAME = ".zonesweep.toml"
    ENV_PREFIX = "ZONESWEEP_"

    SECTIONS = {
        "resolver": ResolverSettings,
        "transfer": TransferSettings,
        "output": OutputSettings,
        "advanced": AdvancedSettings,
    }

    def __init__(
        self,
        user_config_path: Optional[Path] = None,
        project_config_path: Optional[Path] = None,
        load_env: bool = True
    ):
        """
        Initialize ConfigManager.

        Args:
            user_config_path: Custom user config path
            project_config_path: Custom project config path
            load_env: Whether to load from environment variables
        """
        self.user_config_path = user_config_path or self.DEFAULT_USER_CONFIG
        self.project_config_path = project_config_path
        self.load_env = load_env

        self._config = ZoneSweepConfig()
        self._loaded_sources: List[str] = ["defaults"]

    def load(self) -> ZoneSweepConfig:
        """
        Load configuration from all sources.

        Priority (lowest to highest):
        1. Built-in defaults
        2. User config
        3. Project config
        4. Environment variables

        Returns:
            Merged ZoneSweepConfig
        """
        self._config = ZoneSweepConfig()
        self._loaded_sources = ["defaults"]

        if self.user_config_path.exists():
            try:
                self._load_toml_file(self.user_config_path)
                self._loaded_sources.append(f"user:{self.user_config_path}")
            except (ConfigError, OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
                raise ConfigError(f"Error loading user config: {e}")

        project_config = self._find_project_config()
        if project_config and project_config.exists():
            try:
                self._load_toml_file(project_config)
                self._loaded_sources.append(f"project:{project_config}")
            except (ConfigError, OSError, tomllib.TOMLDecodeError, TypeError, ValueError) as e:
                raise ConfigError(f"Error loading project config: {e}")

        if self.load_env:
            self._load_environment()

        return self._config

    def get_config(self) -> ZoneSweepConfig:
        """Get current configuration."""
        return self._config

    def get_loaded_sources(self) -> List[str]:
        """Get list of loaded configuration sources."""
        return self._loaded_sources.copy()

    def save_user_config(
        self,
        config: Optional[ZoneSweepConfig] = None,
        path: Optional[Path] = None
    ) -> Path:
        """
        Save configuration to user config file.

        Args:
            config: Configuration to save (uses current if None)
            path: Custom path (uses default if None)

        Returns:
            Path to saved config file
        """
        config = config or self._config
        path = path or self.user_config_path

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(self._generate_toml(config))

        return path

    def init_config(
        self,
        path: Optional[Path] = None,
        include_comments: bool = True
    ) -> Path:
        """
        Initialize a new configuration file with defaults.

        Args:
            path: Path for config file
            include_comments: Whether to include comments

        Returns:
            Path to created config file
        """
        path = path or self.user_config_path

        if path.exists():
            raise ConfigError(f"Config file already exists: {path}")

        content = self._generate_toml(ZoneSweepConfig(), include_comments=include_comments)

        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            f.write(content)

        return path

    def get_value(self, key_path: str) -> Any:
        """Get a configuration value by dot-separated path."""
        return self._config.get_value(key_path)

    def set_value(self, key_path: str, value: Any) -> None:
        """Set a configuration value by dot-separated path."""
        self._config.set_value(key_path, value)

    def show_config(self, section: Optional[str] = None) -> str:
        """
        Generate a display string for configuration.

        Args:
            section: Specific section to show (shows all if None)

        Returns:
            Formatted configuration string
        """
        config_dict = self._config.to_dict()

        if section:
            if section not in config_dict:
                raise ConfigError(f"Unknown section: {section}")
            config_dict = {section: config_dict[section]}

        return self._format_config_display(config_dict)

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        config = self._config

        for name, port in (("resolver.port", config.resolver.port), ("transfer.port", config.transfer.port)):
            if port < 1 or port > 65535:
                errors.append(f"{name} must be between 1 and 65535")

        if config.resolver.timeout <= 0:
            errors.append("resolver.timeout must be positive")

        if config.transfer.timeout is not None and config.transfer.timeout <= 0:
            errors.append("transfer.timeout must be positive")
        if config.transfer.lifetime is not None and config.transfer.lifetime <= 0:
            errors.append("transfer.lifetime must be positive")

        if config.transfer.workers < 1:
            errors.append("transfer.workers must be at least 1")

        valid_formats = ["json", "csv", "txt"]
        for fmt in config.output.formats:
            if fmt not in valid_formats:
                errors.append(f"output.formats entries must be one of: {', '.join(valid_formats)}")
                break

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if config.advanced.log_level.upper() not in valid_log_levels:
            errors.append(f"advanced.log_level must be one of: {', '.join(valid_log_levels)}")

        return errors

    def _find_project_config(self) -> Optional[Path]:
        """Find project config file by walking up directory tree."""
        if self.project_config_path:
            return self.project_config_path

        current = Path.cwd()

        while current != current.parent:
            config_path = current / self.PROJECT_CONFIG_NAME
            if config_path.exists():
                return config_path
            current = current.parent

        return None

    def _load_toml_file(self, path: Path) -> None:
        """Load and merge a TOML config file."""
        with open(path, "rb") as f:
            data = tomllib.load(f)

        self._merge_config(data)

    def _merge_config(self, data: Dict[str, Any]) -> None:
        """Merge loaded config data into current config."""
        for section, section_cls in self.SECTIONS.items():
            if section not in data:
                continue
            current = getattr(self._config, section)
            setattr(self._config, section, section_cls.from_dict({
                **current.to_dict(),
                **data[section],
            }))

    def _load_environment(self) -> None:
        """Load configuration from environment variables."""
        env_mappings = {
            # Resolver
            f"{self.ENV_PREFIX}NAMESERVER": ("resolver", "nameserver", str),
            f"{self.ENV_PREFIX}RESOLVER_TIMEOUT": ("resolver", "timeout", float),

            # Transfer
            f"{self.ENV_PREFIX}TIMEOUT": ("transfer", "timeout", float),
            f"{self.ENV_PREFIX}LIFETIME": ("transfer", "lifetime", float),
            f"{self.ENV_PREFIX}KEEP_LAST_ENVELOPE": ("transfer", "keep_last_envelope", _parse_bool),
            f"{self.ENV_PREFIX}WORKERS": ("transfer", "workers", int),

            # Output
            f"{self.ENV_PREFIX}OUTPUT": ("output", "formats", _parse_formats),
            f"{self.ENV_PREFIX}VERBOSE": ("output", "verbose", _parse_bool),
            f"{self.ENV_PREFIX}COLOR": ("output", "color_enabled", _parse_bool),

            # Advanced
            f"{self.ENV_PREFIX}LOG_LEVEL": ("advanced", "log_level", str),
            f"{self.ENV_PREFIX}LOG_FILE": ("advanced", "log_file", str),
        }

        for env_var, (section, key, converter) in env_mappings.items():
            value = os.environ.get(env_var)
            if value is not None:
                try:
                    converted = converter(value)
                except (ValueError, TypeError):
                    raise ConfigError(f"Invalid value for {env_var}: {value!r}")
                setattr(getattr(self._config, section), key, converted)
                if "environment" not in self._loaded_sources:
                    self._loaded_sources.append("environment")

    def _generate_toml(
        self,
        config: ZoneSweepConfig,
        include_comments: bool = True
    ) -> str:
        """Generate TOML content from config."""
        lines = []

        if include_comments:
            lines.extend([
                "# ZoneSweep Configuration File",
                "# Generated by ZoneSweep",
                "",
                "# Nameserver discovery (NS queries)",
            ])
        lines.append("[resolver]")
        if config.resolver.nameserver:
            lines.append(f'nameserver = {_toml_str(config.resolver.nameserver)}')
        lines.append(f"port = {config.resolver.port}")
        lines.append(f"timeout = {config.resolver.timeout}")
        lines.append(f'resolv_conf = {_toml_str(config.resolver.resolv_conf)}')
        lines.append("")

        if include_comments:
            lines.append("# Zone transfer (AXFR) settings")
        lines.append("[transfer]")
        lines.append(f"port = {config.transfer.port}")
        if config.transfer.timeout is not None:
            lines.append(f"timeout = {config.transfer.timeout}")
        if config.transfer.lifetime is not None:
            lines.append(f"lifetime = {config.transfer.lifetime}")
        lines.append(f"keep_last_envelope = {str(config.transfer.keep_last_envelope).lower()}")
        lines.append(f"workers = {config.transfer.workers}")
        lines.append("")

        if include_comments:
            lines.append("# Output settings")
        lines.append("[output]")
        formats_str = ", ".join(_toml_str(f) for f in config.output.formats)
        lines.append(f"formats = [{formats_str}]")
        if config.output.json_file:
            lines.append(f'json_file = {_toml_str(config.output.json_file)}')
        if config.output.csv_file:
            lines.append(f'csv_file = {_toml_str(config.output.csv_file)}')
        if config.output.text_file:
            lines.append(f'text_file = {_toml_str(config.output.text_file)}')
        lines.append(f"verbose = {str(config.output.verbose).lower()}")
        lines.append(f"color_enabled = {str(config.output.color_enabled).lower()}")
        lines.append("")

        if include_comments:
            lines.append("# Advanced settings")
        lines.append("[advanced]")
        lines.append(f'log_level = {_toml_str(config.advanced.log_level)}')
        if config.advanced.log_file:
            lines.append(f'log_file = {_toml_str(config.advanced.log_file)}')
        lines.append("")

        return "\n".join(lines)

    def _format_config_display(self, config_dict: Dict[str, Any], indent: int = 0) -> str:
        """Format config dictionary for display."""
        lines = []
        prefix = "  " * indent

        for key, value in config_dict.items():
            if isinstance(value, dict):
                lines.append(f"{prefix}[{key}]")
                lines.append(self._format_config_display(value, indent + 1))
            elif isinstance(value, list):
                list_str = ", ".join(str(v) for v in value)
                lines.append(f"{prefix}{key} = [{list_str}]")
            elif isinstance(value, str):
                lines.append(f'{prefix}{key} = "{value}"')
            elif isinstance(value, bool):
                lines.append(f"{prefix}{key} = {str(value).lower()}")
            elif value is None:
                lines.append(f"{prefix}{key} = (not set)")
            else:
                lines.append(f"{prefix}{key} = {value}")

        return "\n".join(lines)
