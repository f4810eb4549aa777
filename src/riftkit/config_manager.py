"""Persistent riftkit settings in ~/.riftkit/config.toml.

Holds the default install profile, the monitor alert thresholds and the
development ports scanned by the port killer.

Security:
- Config file permissions: 0600 (owner read/write only)
- Path validation
- Input validation on every value that reaches the config file
"""

import logging
import os
import tempfile
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import tomlkit

logger = logging.getLogger(__name__)

PROFILES = ("agent", "full", "custom")

DEFAULT_BASE_PORTS = [3000, 3001, 4000, 4321, 5000, 5173, 8000, 8080, 9000, 9090]


class ConfigError(Exception):
    """Raised when configuration operations fail."""

    pass


def _validate_percent(name: str, value: float) -> float:
    value = float(value)
    if not 0.0 <= value <= 100.0:
        raise ConfigError(f"Invalid {name}: {value}. Must be 0-100.")
    return value


def _validate_port(value: int) -> int:
    value = int(value)
    if not 1 <= value <= 65535:
        raise ConfigError(f"Invalid port number: {value}. Must be 1-65535.")
    return value


@dataclass
class MonitorSettings:
    """Resource monitor settings."""

    interval: int = 2
    cpu_threshold: float = 80.0
    memory_threshold: float = 85.0
    disk_threshold: float = 90.0

    def __post_init__(self):
        if int(self.interval) < 1:
            raise ConfigError(f"Invalid monitor interval: {self.interval}. Must be >= 1.")
        self.interval = int(self.interval)
        self.cpu_threshold = _validate_percent("cpu_threshold", self.cpu_threshold)
        self.memory_threshold = _validate_percent("memory_threshold", self.memory_threshold)
        self.disk_threshold = _validate_percent("disk_threshold", self.disk_threshold)


@dataclass
class PortSettings:
    """Port killer settings."""

    base_ports: list[int] = field(default_factory=lambda: list(DEFAULT_BASE_PORTS))
    range: int = 5
    single_port_grace: float = 2.0
    scan_grace: float = 3.0

    def __post_init__(self):
        if not self.base_ports:
            raise ConfigError("base_ports must list at least one port")
        self.base_ports = [_validate_port(p) for p in self.base_ports]
        if not 1 <= int(self.range) <= 20:
            raise ConfigError(f"Invalid range: {self.range} (must be 1-20)")
        self.range = int(self.range)
        if self.single_port_grace < 0 or self.scan_grace < 0:
            raise ConfigError("Grace periods must not be negative")


@dataclass
class RiftkitConfig:
    """riftkit configuration data."""

    default_profile: str = "agent"
    install_log: str = "/tmp/riftkit-install.log"
    monitor: MonitorSettings = field(default_factory=MonitorSettings)
    ports: PortSettings = field(default_factory=PortSettings)

    def __post_init__(self):
        if self.default_profile not in PROFILES:
            raise ConfigError(
                f"Unknown profile: {self.default_profile}. Must be one of {', '.join(PROFILES)}"
            )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RiftkitConfig":
        """Create from dictionary."""
        try:
            return cls(
                default_profile=data.get("default_profile", "agent"),
                install_log=data.get("install_log", "/tmp/riftkit-install.log"),
                monitor=MonitorSettings(**dict(data.get("monitor", {}))),
                ports=PortSettings(**dict(data.get("ports", {}))),
            )
        except TypeError as e:
            raise ConfigError(f"Unknown configuration key: {e}") from e
        except ValueError as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


class ConfigManager:
    """Manage riftkit configuration file.

    Configuration is stored at ~/.riftkit/config.toml with secure permissions.
    """

    DEFAULT_CONFIG_DIR = Path.home() / ".riftkit"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def _allowed_dirs(cls) -> list[Path]:
        """Config dir, cwd and temp dir, plus the invoking user's ~/.riftkit under sudo."""
        dirs = [cls.DEFAULT_CONFIG_DIR, Path.cwd(), Path(tempfile.gettempdir())]
        sudo_user = os.environ.get("SUDO_USER")
        if sudo_user and sudo_user != "root":
            dirs.append(Path(os.path.expanduser(f"~{sudo_user}")) / ".riftkit")
        return dirs

    @classmethod
    def _validate_config_path(cls, path: Path) -> Path:
        """Resolve ``path`` and require it under the config dir, cwd or the temp dir."""
        resolved = path.resolve()
        if any(resolved.is_relative_to(d.resolve()) for d in cls._allowed_dirs()):
            return resolved

        allowed = "\n".join(f"  - {d}" for d in cls._allowed_dirs())
        raise ConfigError(
            f"Config path outside allowed directories: {resolved}\n"
            f"Allowed directories:\n{allowed}"
        )

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """The default config file, or a validated ``--config`` path that must exist."""
        if not custom_path:
            return cls.DEFAULT_CONFIG_FILE
        path = cls._validate_config_path(Path(custom_path).expanduser())
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        return path

    @classmethod
    def ensure_config_dir(cls) -> Path:
        """Create ~/.riftkit with mode 0700."""
        try:
            cls.DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
            os.chmod(cls.DEFAULT_CONFIG_DIR, 0o700)
        except OSError as e:
            raise ConfigError(f"Failed to create config directory: {e}") from e
        return cls.DEFAULT_CONFIG_DIR

    @staticmethod
    def _tighten_permissions(path: Path) -> None:
        mode = path.stat().st_mode & 0o777
        if mode & 0o077:
            logger.warning(f"{path} is readable by others ({oct(mode)}), resetting to 0600")
            os.chmod(path, 0o600)

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> RiftkitConfig:
        """Read the config file; a missing default file means built-in defaults.

        Raises:
            ConfigError: If the file is unreadable, not TOML, or holds invalid values
        """
        config_path = cls.get_config_path(custom_path)
        if not config_path.exists():
            return RiftkitConfig()

        try:
            cls._tighten_permissions(config_path)
            data = tomllib.loads(config_path.read_text())
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"Failed to load config: {e}") from e

        logger.debug(f"Loaded config from: {config_path}")
        return RiftkitConfig.from_dict(data)

    @classmethod
    def save_config(cls, config: RiftkitConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file.

        Existing comments and formatting are preserved. The write goes to a
        temporary file that is renamed into place.

        Returns:
            Path the config was written to

        Raises:
            ConfigError: If saving fails or path is outside allowed directories
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = cls._validate_config_path(Path(custom_path).expanduser())
                config_path.parent.mkdir(parents=True, exist_ok=True)
            else:
                cls.ensure_config_dir()
                config_path = cls.DEFAULT_CONFIG_FILE

            temp_path = config_path.with_suffix(".tmp")

            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()

            for key, value in config.to_dict().items():
                if isinstance(value, dict):
                    table = doc.get(key)
                    if table is None:
                        table = tomlkit.table()
                        doc[key] = table
                    for sub_key, sub_value in value.items():
                        table[sub_key] = sub_value
                else:
                    doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except (OSError, ValueError) as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

    @classmethod
    def set_value(cls, key: str, raw_value: str, custom_path: str | None = None) -> RiftkitConfig:
        """Set a single configuration value from its string form.

        Args:
            key: Top-level key or dotted ``section.key`` (e.g. ``monitor.interval``)
            raw_value: Value as typed on the command line
            custom_path: Custom config file path (optional)

        Returns:
            Updated RiftkitConfig

        Raises:
            ConfigError: If the key is unknown or the value invalid
        """
        config = cls.load_config(custom_path)
        data = config.to_dict()

        section, _, name = key.rpartition(".")
        target = data
        if section:
            if section not in ("monitor", "ports"):
                raise ConfigError(f"Unknown config section: {section}")
            target = data[section]
        if name not in target or isinstance(target[name], dict):
            raise ConfigError(f"Unknown config key: {key}")

        target[name] = cls._coerce(target[name], raw_value, key)

        updated = RiftkitConfig.from_dict(data)
        cls.save_config(updated, custom_path)
        return updated

    @staticmethod
    def _coerce(current: Any, raw_value: str, key: str) -> Any:
        try:
            if isinstance(current, bool):
                return raw_value.lower() in ("1", "true", "yes", "on")
            if isinstance(current, int):
                return int(raw_value)
            if isinstance(current, float):
                return float(raw_value)
            if isinstance(current, list):
                return [int(p) for p in raw_value.replace(",", " ").split()]
        except ValueError as e:
            raise ConfigError(f"Invalid value for {key}: {raw_value}") from e
        return raw_value

    @classmethod
    def format_config(cls, config: RiftkitConfig) -> str:
        """Render config as TOML text for display."""
        return tomlkit.dumps(config.to_dict())


def config_keys() -> list[str]:
    """All settable keys, dotted for nested sections."""
    keys = ["default_profile", "install_log"]
    keys.extend(f"monitor.{f.name}" for f in fields(MonitorSettings))
    keys.extend(f"ports.{f.name}" for f in fields(PortSettings))
    return keys


__all__ = [
    "DEFAULT_BASE_PORTS",
    "PROFILES",
    "ConfigError",
    "ConfigManager",
    "MonitorSettings",
    "PortSettings",
    "RiftkitConfig",
    "config_keys",
]
