"""
Engine Configuration

Loads engine settings from the environment (optionally via a ``.env`` file)
and specification presets from JSON files.

Environment variables:
- DYNSSZ_NO_FASTSSZ: force the generic codec path ("1", "true", ...)
- DYNSSZ_SPEC_FILE: preset file(s), separated by os.pathsep; later files win
- DYNSSZ_LOG_LEVEL: log level applied by the CLI

Preset files are either a flat ``{"NAME": value}`` object or
``{"preset": "minimal", "values": {...}}``. Values may be integers or numeric
strings, as in consensus-layer config files; non-numeric entries (fork
versions, addresses) are skipped.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, validator

from .engine import DynSsz
from .errors import ConfigurationError
from .specs import SpecEntry

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class SpecPreset(BaseModel):
    """
    A named set of specification values.

    Attributes:
        preset: Optional preset name (e.g. "mainnet", "minimal")
        values: Specification name to integer value
    """
    preset: Optional[str] = Field(default=None, description="Preset name")
    values: Dict[str, int] = Field(default_factory=dict, description="Specification values")

    @validator("values", pre=True)
    def drop_non_numeric(cls, v):
        """Keep integer and decimal-string values, skip everything else."""
        if not isinstance(v, dict):
            raise ValueError("values must be an object")
        kept = {}
        for name, value in v.items():
            if isinstance(value, bool):
                continue
            if isinstance(value, int) or (isinstance(value, str) and value.strip().isdigit()):
                kept[name] = value
            else:
                logger.debug(f"Skipping non-numeric specification value {name}={value!r}")
        return kept


class EngineSettings(BaseModel):
    """
    Settings used to construct a DynSsz engine.

    Attributes:
        no_fast_ssz: Force the generic codec path
        spec_files: Preset files applied in order
        log_level: Log level name
    """
    no_fast_ssz: bool = Field(default=False, description="Force the generic codec path")
    spec_files: List[str] = Field(default_factory=list, description="Preset files applied in order")
    log_level: str = Field(default="WARNING", description="Log level name")

    @validator("log_level")
    def validate_log_level(cls, v):
        """Validate log level is a standard logging level name."""
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}")
        return level


def load_settings() -> EngineSettings:
    """
    Read engine settings from the environment.

    Raises:
        ConfigurationError: If an environment value is invalid
    """
    spec_env = os.getenv("DYNSSZ_SPEC_FILE", "")
    raw = {
        "no_fast_ssz": os.getenv("DYNSSZ_NO_FASTSSZ", "false"),
        "spec_files": [path for path in spec_env.split(os.pathsep) if path],
        "log_level": os.getenv("DYNSSZ_LOG_LEVEL", "WARNING"),
    }
    try:
        return EngineSettings(**raw)
    except ValidationError as e:
        raise ConfigurationError(f"invalid engine settings: {e}")


def load_spec_file(path: str) -> Dict[str, int]:
    """
    Load a specification preset from a JSON file.

    Args:
        path: Path to the preset file

    Returns:
        Specification name to value mapping

    Raises:
        ConfigurationError: If the file cannot be read or is malformed
    """
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"cannot load specification file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"specification file {path} must contain a JSON object")
    if "values" not in data:
        data = {"values": data}

    try:
        preset = SpecPreset(**data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid specification file {path}: {e}")

    logger.info(f"Loaded {len(preset.values)} specification values from {path}"
                + (f" (preset {preset.preset})" if preset.preset else ""))
    return dict(preset.values)


def create_engine(settings: Optional[EngineSettings] = None,
                  extra_specs: Optional[Sequence[SpecEntry]] = None) -> DynSsz:
    """
    Build an engine from settings (the environment by default).

    Args:
        settings: Engine settings; loaded via load_settings() when None
        extra_specs: Additional override entries applied after the files

    Returns:
        Configured DynSsz engine
    """
    if settings is None:
        settings = load_settings()

    specs: List[Any] = [load_spec_file(path) for path in settings.spec_files]
    specs.extend(extra_specs or ())
    return DynSsz(specs, no_fast_ssz=settings.no_fast_ssz)
