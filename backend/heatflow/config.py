"""Environment configuration management for heatflow.

Settings are read from environment variables, optionally seeded from .env
files in the working directory.

File Priority (highest to lowest):
1. .env.local (local overrides, gitignored)
2. .env (base configuration)
3. Environment variables already set in the process
"""

import os
import sys
import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Air heat factor: 1.08 Btu/(hr·CFM·°F) for sensible heat of standard air
DEFAULT_AIR_HEAT_FACTOR = 1.08

# Infiltration scaling conventions. The per-hour degree-day convention
# multiplies by 24 and reports in thousands.
UNIT_INFILTRATION_SCALE = 1.0
DAILY_KILO_INFILTRATION_SCALE = 24.0 / 1000.0

# Weather-file base temperatures are in the weather file's own units (°C)
DEFAULT_HEATING_BASE_TEMP = 18.0
DEFAULT_COOLING_BASE_TEMP = 24.0


def load_environment(env_dir: Optional[Union[str, Path]] = None) -> None:
    """Load environment variables from .env files.

    Args:
        env_dir: Directory containing .env files. Defaults to current directory.
    """
    env_dir = Path.cwd() if env_dir is None else Path(env_dir)

    # Load files in reverse priority order (last loaded wins)
    env_files = [
        env_dir / ".env",
        env_dir / ".env.local",
    ]

    loaded_files = []
    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=True)
            loaded_files.append(env_file.name)
            logger.debug(f"Loaded environment from {env_file}")

    if loaded_files:
        logger.info(f"Environment loaded from: {', '.join(loaded_files)}")


def get_env_bool(key: str, default: bool = False) -> bool:
    """Get boolean environment variable.

    Args:
        key: Environment variable name
        default: Default value if not set or invalid

    Returns:
        Boolean value
    """
    value = os.getenv(key, "").lower()
    if value in ("true", "1", "yes", "on"):
        return True
    elif value in ("false", "0", "no", "off"):
        return False
    else:
        return default


def get_env_float(key: str, default: float = 0.0) -> float:
    """Get float environment variable, falling back to default when invalid."""
    try:
        return float(os.getenv(key, str(default)))
    except ValueError:
        logger.warning(f"Invalid float value for {key}, using default: {default}")
        return default


@dataclass(frozen=True)
class EngineSettings:
    """Physical constants and conventions used by the heat-transfer engine"""
    air_heat_factor: float = DEFAULT_AIR_HEAT_FACTOR
    infiltration_scale: float = UNIT_INFILTRATION_SCALE
    hours_per_day: float = 24.0


@dataclass(frozen=True)
class ReducerSettings:
    """Defaults for reducing hourly weather records"""
    heating_base_temp: float = DEFAULT_HEATING_BASE_TEMP
    cooling_base_temp: float = DEFAULT_COOLING_BASE_TEMP


@lru_cache(maxsize=1)
def get_engine_settings() -> EngineSettings:
    """Engine settings from HEATFLOW_* environment variables (read once)"""
    return EngineSettings(
        air_heat_factor=get_env_float("HEATFLOW_AIR_HEAT_FACTOR", DEFAULT_AIR_HEAT_FACTOR),
        infiltration_scale=get_env_float("HEATFLOW_INFILTRATION_SCALE", UNIT_INFILTRATION_SCALE),
    )


@lru_cache(maxsize=1)
def get_reducer_settings() -> ReducerSettings:
    """Weather reducer settings from HEATFLOW_* environment variables (read once)"""
    return ReducerSettings(
        heating_base_temp=get_env_float("HEATFLOW_HEATING_BASE_TEMP", DEFAULT_HEATING_BASE_TEMP),
        cooling_base_temp=get_env_float("HEATFLOW_COOLING_BASE_TEMP", DEFAULT_COOLING_BASE_TEMP),
    )


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure application logging"""
    if level is None:
        debug = get_env_bool("HEATFLOW_DEBUG", False)
        level = os.getenv("HEATFLOW_LOG_LEVEL", "DEBUG" if debug else "INFO")
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    app_logger = logging.getLogger('heatflow')
    app_logger.setLevel(log_level)
    return app_logger
