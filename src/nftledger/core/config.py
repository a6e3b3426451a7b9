"""
Ledger configuration.

Settings are resolved from several sources, lowest priority first:
1. Built-in defaults
2. A YAML config file (optional)
3. Environment variables (NFTLEDGER_*), including a local .env file
4. Explicit overrides passed by the caller
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, TextIO

import yaml
from dotenv import load_dotenv

from .structured_logger import VALID_LOG_LEVELS, configure_logging
from .types import IdKind

logger = logging.getLogger(__name__)

ENV_PREFIX = "NFTLEDGER_"
UNBOUNDED_MARKERS = ("", "none", "unlimited", "inf", "infinity")
TRUE_MARKERS = ("1", "true", "yes", "on")
FALSE_MARKERS = ("0", "false", "no", "off")


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def _parse_bool(name: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_MARKERS:
        return True
    if text in FALSE_MARKERS:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {value!r}")


def _parse_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid integer for {name}: {value!r}") from exc


def _parse_max_supply(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in UNBOUNDED_MARKERS:
        return None
    return _parse_int("max_supply", value)


def _parse_id_kind(value: Any) -> IdKind:
    if isinstance(value, IdKind):
        return value
    try:
        return IdKind.parse(str(value))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


_PARSERS = {
    "max_supply": _parse_max_supply,
    "id_kind": _parse_id_kind,
    "first_token_id": lambda value: _parse_int("first_token_id", value),
    "strict_approvals": lambda value: _parse_bool("strict_approvals", value),
    "purge_on_burn": lambda value: _parse_bool("purge_on_burn", value),
    "raise_on_out_of_bounds": lambda value: _parse_bool("raise_on_out_of_bounds", value),
    "log_level": lambda value: str(value).strip().upper(),
}


@dataclass
class LedgerConfig:
    """Behavioural settings for one ledger instance."""

    max_supply: Optional[int] = None  # None = unbounded
    id_kind: IdKind = IdKind.U128
    first_token_id: int = 1
    strict_approvals: bool = False
    purge_on_burn: bool = True
    raise_on_out_of_bounds: bool = False
    log_level: str = "INFO"

    def validate(self) -> None:
        """Validate ledger configuration"""
        if self.max_supply is not None and self.max_supply < 0:
            raise ConfigurationError(
                f"Invalid max_supply: {self.max_supply}. Must be >= 0 or unbounded"
            )
        if not isinstance(self.id_kind, IdKind) or not self.id_kind.is_integer:
            raise ConfigurationError(
                f"Invalid id_kind: {self.id_kind}. Generated ids must use an integer kind"
            )
        if not 0 <= self.first_token_id <= self.id_kind.max_value:
            raise ConfigurationError(
                f"Invalid first_token_id: {self.first_token_id}. "
                f"Must fit in {self.id_kind.name}"
            )
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}. Must be one of {list(VALID_LOG_LEVELS)}"
            )

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "LedgerConfig":
        """Build a validated config from loosely typed values (YAML, env, CLI)."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown ledger settings: {sorted(unknown)}")

        values = {name: _PARSERS[name](value) for name, value in data.items()}
        config = cls(**values)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["id_kind"] = self.id_kind.name.lower()
        return data


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collect NFTLEDGER_* variables that name a ledger setting."""
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(LedgerConfig)}
    overrides = {}
    for key, value in environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        name = key[len(ENV_PREFIX):].lower()
        if name in known:
            overrides[name] = value
    return overrides


class ConfigManager:
    """
    Loads a LedgerConfig from defaults, file, environment and overrides.

    Priority (highest first):
    1. Explicit overrides
    2. Environment variables (NFTLEDGER_*)
    3. Config file
    4. Built-in defaults
    """

    def __init__(
        self,
        config_file: Optional[str | Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None,
        load_env_file: bool = True,
    ) -> None:
        """
        Initialize Configuration Manager

        Args:
            config_file: Optional YAML file with a top-level "ledger" section
            overrides: Explicit setting overrides
            environ: Environment mapping (defaults to os.environ)
            load_env_file: Whether to load a local .env file first
        """
        if load_env_file and environ is None:
            load_dotenv()

        self.config_file = Path(config_file).resolve() if config_file else None
        self.overrides = overrides or {}
        self.environ = environ
        self._raw_config: Dict[str, Any] = {}
        self.ledger = self._load_configuration()

    def _load_config_file(self) -> Dict[str, Any]:
        if self.config_file is None:
            return {}
        if not self.config_file.exists():
            raise ConfigurationError(f"Config file not found: {self.config_file}")

        with open(self.config_file, "r", encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    f"Invalid YAML in {self.config_file}: {exc}"
                ) from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {self.config_file} must contain a mapping")
        section = data.get("ledger", {})
        if not isinstance(section, dict):
            raise ConfigurationError("'ledger' section must be a mapping")
        return section

    def _load_configuration(self) -> LedgerConfig:
        """Load configuration from all sources with proper precedence"""
        merged: Dict[str, Any] = {}
        merged.update(self._load_config_file())
        merged.update(env_overrides(self.environ))
        merged.update(self.overrides)
        self._raw_config = dict(merged)

        config = LedgerConfig.from_mapping(merged)
        logger.debug(
            "Ledger configuration loaded",
            extra={
                "event": "config.loaded",
                "source_file": str(self.config_file) if self.config_file else None,
                "settings": sorted(merged),
            },
        )
        return config

    def get(self, name: str, default: Any = None) -> Any:
        return getattr(self.ledger, name, default)

    def to_dict(self) -> Dict[str, Any]:
        return self.ledger.to_dict()

    def setup_logging(self, stream: Optional[TextIO] = None) -> logging.Logger:
        """Attach the JSON handler at the configured log level."""
        return configure_logging(self.ledger.log_level, stream=stream)
