"""VibeProxy configuration model and on-disk store."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import NoneType, UnionType
from typing import Any, Self, get_args

from platformdirs import user_config_dir

from vibeproxy.core.constants import (
    APP_AUTHOR,
    APP_NAME,
    CONFIG_DIR_ENV,
    CONFIG_FILE_NAME,
    DEFAULT_BACKEND_PORT,
    DEFAULT_BACKEND_TIMEOUT_SECS,
    DEFAULT_BACKEND_URL,
    DEFAULT_PROXY_LISTEN_PORT,
    DEFAULT_SLM_MODEL,
    DEFAULT_SLM_PORT,
    DEFAULT_SLM_URL,
    DEFAULT_THINKING_PROXY_PORT,
    SLMBackend,
)
from vibeproxy.core.exceptions import ConfigParseError, ConfigurationError, ConfigWriteError

logger = logging.getLogger(__name__)

MAX_PORT = 65535


def _check_value(section: str, name: str, value: Any, expected: Any) -> None:
    """Raise TypeError if a loaded value does not match its field annotation."""
    allowed = get_args(expected) if isinstance(expected, UnionType) else (expected,)
    if value is None and NoneType in allowed:
        return
    for kind in allowed:
        # bool is an int subclass but never a valid port or timeout
        if kind is int and isinstance(value, bool):
            continue
        if kind is not NoneType and isinstance(value, kind):
            return
    names = " or ".join("null" if k is NoneType else k.__name__ for k in allowed)
    raise TypeError(f"{section}.{name} must be {names}, got {type(value).__name__}")


def _section(cls: type, section: str, data: Any) -> Any:
    """Build one config section from its loaded dictionary."""
    if not isinstance(data, dict):
        raise TypeError(f"{section} must be an object, got {type(data).__name__}")
    known = {f.name: f.type for f in fields(cls)}
    unknown = sorted(set(data) - set(known))
    if unknown:
        raise TypeError(f"{section} has unknown fields: {', '.join(unknown)}")
    for name, value in data.items():
        _check_value(section, name, value, known[name])
        if name.endswith("port") and not 0 < value <= MAX_PORT:
            raise ValueError(f"{section}.{name} must be between 1 and {MAX_PORT}, got {value}")
    if "timeout_secs" in data and data["timeout_secs"] <= 0:
        raise ValueError(f"{section}.timeout_secs must be positive, got {data['timeout_secs']}")
    return cls(**data)


@dataclass(frozen=True)
class BackendConfig:
    """Backend connection configuration."""

    url: str = DEFAULT_BACKEND_URL
    port: int = DEFAULT_BACKEND_PORT
    api_key: str | None = None
    timeout_secs: int = DEFAULT_BACKEND_TIMEOUT_SECS
    use_connect: bool = False

    @property
    def base_url(self) -> str:
        """Get backend base URL."""
        return f"{self.url}:{self.port}"


@dataclass(frozen=True)
class SLMConfig:
    """Local SLM server configuration."""

    url: str = DEFAULT_SLM_URL
    port: int = DEFAULT_SLM_PORT
    backend: SLMBackend = SLMBackend.VLLM
    auto_start: bool = False
    default_model: str = DEFAULT_SLM_MODEL

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create SLM config from dictionary."""
        if isinstance(data, dict) and "backend" in data:
            data = dict(data)
            data["backend"] = SLMBackend(data["backend"])
        return _section(cls, "slm", data)


@dataclass(frozen=True)
class TunnelConfig:
    """Tunnel configuration."""

    enabled: bool = False
    tunnel_id: str | None = None
    credentials_path: str | None = None
    auto_connect: bool = False


@dataclass(frozen=True)
class ProxyConfig:
    """Local proxy configuration."""

    listen_port: int = DEFAULT_PROXY_LISTEN_PORT
    enable_thinking_proxy: bool = True
    thinking_proxy_port: int = DEFAULT_THINKING_PROXY_PORT


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration."""

    backend: BackendConfig = field(default_factory=BackendConfig)
    slm: SLMConfig = field(default_factory=SLMConfig)
    tunnel: TunnelConfig = field(default_factory=TunnelConfig)
    proxy: ProxyConfig = field(default_factory=ProxyConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        return cls(
            backend=_section(BackendConfig, "backend", data.get("backend", {})),
            slm=SLMConfig.from_dict(data.get("slm", {})),
            tunnel=_section(TunnelConfig, "tunnel", data.get("tunnel", {})),
            proxy=_section(ProxyConfig, "proxy", data.get("proxy", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "backend": {
                "url": self.backend.url,
                "port": self.backend.port,
                "api_key": self.backend.api_key,
                "timeout_secs": self.backend.timeout_secs,
                "use_connect": self.backend.use_connect,
            },
            "slm": {
                "url": self.slm.url,
                "port": self.slm.port,
                "backend": self.slm.backend.value,
                "auto_start": self.slm.auto_start,
                "default_model": self.slm.default_model,
            },
            "tunnel": {
                "enabled": self.tunnel.enabled,
                "tunnel_id": self.tunnel.tunnel_id,
                "credentials_path": self.tunnel.credentials_path,
                "auto_connect": self.tunnel.auto_connect,
            },
            "proxy": {
                "listen_port": self.proxy.listen_port,
                "enable_thinking_proxy": self.proxy.enable_thinking_proxy,
                "thinking_proxy_port": self.proxy.thinking_proxy_port,
            },
        }


def resolve_config_dir() -> Path | None:
    """Resolve the per-user config directory, or None if there is none."""
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    try:
        path = user_config_dir(APP_NAME, APP_AUTHOR)
    except (KeyError, OSError, RuntimeError) as e:
        logger.warning(f"Could not resolve user config directory: {e}")
        return None
    return Path(path) if path else None


class ConfigStore:
    """Loads and saves AppConfig at a fixed per-user location.

    The location is resolved once at construction. Writes go to a temporary
    file in the same directory which is then renamed over the target, so a
    reader never observes a half-written file.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """
        Initialize config store.

        Args:
            config_dir: Directory holding the config file. Resolved from
                the environment or platform when not given.

        Raises:
            ConfigurationError: If the config directory cannot be created.
        """
        if config_dir is None:
            config_dir = resolve_config_dir()

        if config_dir is None:
            # No per-user location; fall back to the working directory
            self._path = Path(CONFIG_FILE_NAME)
            return

        try:
            config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Failed to create config directory: {e}",
                path=config_dir,
            ) from e
        self._path = config_dir / CONFIG_FILE_NAME

    @property
    def path(self) -> Path:
        """Get config file path."""
        return self._path

    def exists(self) -> bool:
        """Check whether the config file has been written."""
        return self._path.exists()

    def load(self) -> AppConfig:
        """Load configuration from file or use defaults."""
        logger.info(f"Loading configuration from: {self._path}")

        if not self._path.exists():
            logger.info("Config file not found, using defaults")
            return AppConfig()

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigParseError(
                f"Invalid JSON in config file: {e}",
                path=self._path,
            ) from e
        except OSError as e:
            raise ConfigParseError(
                f"Failed to read config file: {e}",
                path=self._path,
            ) from e

        if not isinstance(data, dict):
            raise ConfigParseError(
                "Config file must contain a JSON object",
                path=self._path,
            )

        try:
            config = AppConfig.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigParseError(
                f"Invalid configuration values: {e}",
                path=self._path,
            ) from e

        logger.info("Configuration loaded successfully")
        return config

    def save(self, config: AppConfig) -> None:
        """Save configuration to file atomically."""
        logger.info(f"Saving configuration to: {self._path}")

        content = json.dumps(config.to_dict(), indent=2)
        directory = self._path.parent
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=directory
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as e:
            raise ConfigWriteError(
                f"Failed to write config file: {e}",
                path=self._path,
            ) from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.info("Configuration saved successfully")
