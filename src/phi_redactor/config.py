"""JSON/YAML/dict config loader for phi-redactor.

Supports loading from a JSON file (the CLI's native format), a YAML file,
or a plain dict (for embedding in a larger config).

Example JSON:

    {
      "names": ["Meredith Grey", "Derek Shepherd"],
      "keywords": ["Grey Sloan Memorial"],
      "mrn_min_length": 5,
      "mrn_max_length": 12
    }

Example YAML:

    phi_redactor:
      names:
        - Meredith Grey
      keywords:
        - Grey Sloan Memorial
      mrn_min_length: 5
      mrn_max_length: 12
      skip:
        - relative-date
      safe_harbor: true
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from collections.abc import Iterable
from typing import Any

from .errors import ConfigurationError
from .types import Category

logger = logging.getLogger(__name__)

DEFAULT_MRN_MIN_LENGTH = 6
DEFAULT_MRN_MAX_LENGTH = 10

_KNOWN_KEYS = frozenset({
    "names", "keywords", "mrn_min_length", "mrn_max_length", "skip", "safe_harbor",
})

# Spellings accepted on the command line and in config files.
_CATEGORY_ALIASES: dict[str, Category] = {
    "relative_date": Category.REL_DATE,
    "reldate": Category.REL_DATE,
    "coordinate": Category.COORD,
    "coordinates": Category.COORD,
    "zip_code": Category.ZIP,
    "zipcode": Category.ZIP,
    "ip_address": Category.IP,
    "vin": Category.VEHICLE,
}


@dataclass(frozen=True)
class RedactorConfig:
    """Immutable configuration for the Redactor."""
    names: tuple[str, ...] = ()        # extra person names
    keywords: tuple[str, ...] = ()     # extra facility names / keywords
    mrn_min_length: int = DEFAULT_MRN_MIN_LENGTH
    mrn_max_length: int = DEFAULT_MRN_MAX_LENGTH
    # Categories never redacted
    skip: frozenset[Category] = field(default_factory=frozenset)
    # Enables INSURANCE, LICENSE, VEHICLE, DEVICE and IP
    safe_harbor: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", _string_tuple("names", self.names))
        object.__setattr__(self, "keywords", _string_tuple("keywords", self.keywords))
        object.__setattr__(self, "skip", frozenset(parse_categories(self.skip)))

        for key in ("mrn_min_length", "mrn_max_length"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{key} must be an integer, got {value!r}")
            if value < 1:
                raise ConfigurationError(f"{key} must be positive, got {value}")
        if self.mrn_min_length > self.mrn_max_length:
            raise ConfigurationError(
                f"invalid MRN length range: {self.mrn_min_length}-{self.mrn_max_length}"
            )
        if not isinstance(self.safe_harbor, bool):
            raise ConfigurationError(f"safe_harbor must be a boolean, got {self.safe_harbor!r}")

    def with_overrides(
        self,
        *,
        skip: Iterable[Category | str] = (),
        safe_harbor: bool = False,
    ) -> RedactorConfig:
        """Return a copy with extra skipped categories and Safe Harbor turned on if asked."""
        return replace(
            self,
            skip=self.skip | frozenset(parse_categories(skip)),
            safe_harbor=self.safe_harbor or safe_harbor,
        )


def parse_category(name: Category | str) -> Category:
    """Resolve a category name such as ``person``, ``REL_DATE`` or ``relative-date``."""
    if isinstance(name, Category):
        return name
    if not isinstance(name, str):
        raise ConfigurationError(f"category name must be a string, got {name!r}")
    key = name.strip().lower().replace("-", "_")
    if key in _CATEGORY_ALIASES:
        return _CATEGORY_ALIASES[key]
    try:
        return Category(key.upper())
    except ValueError:
        raise ConfigurationError(f"unknown category: {name!r}") from None


def parse_categories(names: Iterable[Category | str]) -> list[Category]:
    if isinstance(names, str):
        names = [names]
    return [parse_category(n) for n in names]


def _string_tuple(key: str, values: Any) -> tuple[str, ...]:
    if isinstance(values, str) or not isinstance(values, Iterable):
        raise ConfigurationError(f"{key} must be a list of strings")
    out = tuple(values)
    for v in out:
        if not isinstance(v, str):
            raise ConfigurationError(f"{key} must contain only strings, got {v!r}")
    return out


def load_config(data: dict[str, Any]) -> RedactorConfig:
    """Build a validated config from a dict (from JSON, YAML or inline)."""
    if not isinstance(data, dict):
        raise ConfigurationError("config must be a JSON/YAML object")
    # Support nested under "phi_redactor" key or flat
    if "phi_redactor" in data:
        data = data["phi_redactor"] or {}
        if not isinstance(data, dict):
            raise ConfigurationError("'phi_redactor' section must be an object")

    unknown = set(data) - _KNOWN_KEYS
    if unknown:
        raise ConfigurationError(f"unknown config keys: {', '.join(sorted(unknown))}")

    config = RedactorConfig(
        names=data.get("names") or (),
        keywords=data.get("keywords") or (),
        mrn_min_length=_or_default(data.get("mrn_min_length"), DEFAULT_MRN_MIN_LENGTH),
        mrn_max_length=_or_default(data.get("mrn_max_length"), DEFAULT_MRN_MAX_LENGTH),
        skip=data.get("skip") or (),
        safe_harbor=_or_default(data.get("safe_harbor"), False),
    )
    logger.debug(
        "Loaded config: %d names, %d keywords, MRN %d-%d, skip=%s, safe_harbor=%s",
        len(config.names), len(config.keywords),
        config.mrn_min_length, config.mrn_max_length,
        sorted(c.value for c in config.skip), config.safe_harbor,
    )
    return config


def _or_default(value: Any, default: Any) -> Any:
    return default if value is None else value


def load_from_json(path: str | Path) -> RedactorConfig:
    """Load config from a JSON file."""
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"failed to read config file: {path}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"failed to parse config JSON: {path}") from e
    return load_config(data)


def load_from_yaml(path: str | Path) -> RedactorConfig:
    """Load config from a YAML file."""
    import yaml
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"failed to read config file: {path}") from e
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"failed to parse config YAML: {path}") from e
    return load_config(data or {})


def load_from_file(path: str | Path) -> RedactorConfig:
    """Dispatch on extension: ``.yaml``/``.yml`` → YAML, anything else → JSON."""
    if Path(path).suffix.lower() in (".yaml", ".yml"):
        return load_from_yaml(path)
    return load_from_json(path)
