"""
Aquatic Monitor Configuration
=============================

This module handles configuration loading for the aquatic monitor.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    AQUA_LOG_LEVEL        -> logging.level
    AQUA_EVENT_LOG_PATH   -> event_log.path
    AQUA_WASTE_DATASET    -> datasets.waste_path
    AQUA_MARINE_DATASET   -> datasets.marine_path
    AQUA_IMAGE_ROOT       -> datasets.image_root
    AQUA_RUN_DURATION     -> system.run_duration_seconds
    AQUA_TICK_SECONDS     -> schedule.tick_seconds

Example:
    from aquatic_monitor.config import load_config

    settings = load_config("config.yaml")
    print(settings.system.name)
    print(settings.power.battery.capacity_wh)
    print(settings.thresholds.collection_percent)
"""

import os
import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class SystemConfig(BaseModel):
    """Platform identification and run length."""

    name: str = Field(default="floating-aquatic-monitor", description="System name")
    version: str = Field(default="v0.1.0", description="Software version")
    run_duration_seconds: float = Field(
        default=300.0,
        ge=0,
        description="Seconds to run before stopping (0 = until signalled)",
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for capture choice and fallback readings (None = nondeterministic)",
    )


class SolarConfig(BaseModel):
    """Solar panel configuration."""

    efficiency: float = Field(default=0.20, gt=0, le=1.0, description="Conversion efficiency")
    area_m2: float = Field(default=0.75, gt=0, description="Panel area in m²")
    sunlight_base_w_m2: float = Field(
        default=500.0,
        ge=0,
        description="Irradiance at the edges of the daylight window",
    )
    sunlight_amplitude_w_m2: float = Field(
        default=300.0,
        ge=0,
        description="Additional irradiance at local noon",
    )


class BatteryConfig(BaseModel):
    """Battery configuration."""

    capacity_wh: float = Field(default=500.0, gt=0, description="Capacity in Wh")
    max_charge_rate_w: float = Field(default=100.0, gt=0, description="Max charge power in W")
    initial_charge_fraction: float = Field(
        default=0.7,
        ge=0,
        le=1.0,
        description="Charge at startup as a fraction of capacity",
    )


class PowerConfig(BaseModel):
    """Power subsystem configuration."""

    solar: SolarConfig = Field(default_factory=SolarConfig)
    battery: BatteryConfig = Field(default_factory=BatteryConfig)
    sensor_power_w: float = Field(default=2.0, ge=0, description="Environmental sensor draw")
    camera_power_w: float = Field(default=5.0, ge=0, description="Camera draw")
    processing_power_w: float = Field(default=10.0, ge=0, description="Detection processing draw")


class ConveyorConfig(BaseModel):
    """Waste conveyor configuration."""

    power_usage_w: float = Field(default=150.0, ge=0, description="Draw while active")
    speed_m_s: float = Field(default=0.5, ge=0, description="Belt speed")
    dwell_seconds: float = Field(default=2.0, ge=0, description="Handling time per item")
    poll_interval_seconds: float = Field(
        default=0.1,
        gt=0,
        description="Stop-check interval during the dwell",
    )


class ScheduleConfig(BaseModel):
    """Control loop timing."""

    tick_seconds: float = Field(default=1.0, gt=0, description="Loop period")
    error_backoff_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Pause after an unexpected tick error",
    )
    env_interval_hours: float = Field(default=1.0 / 12.0, gt=0, description="Env sampling interval")
    detection_interval_hours: float = Field(default=1.0 / 6.0, gt=0, description="Detection interval")
    status_interval_hours: float = Field(default=0.25, gt=0, description="Status report interval")
    sensor_duration_hours: float = Field(default=0.01, ge=0, description="Env sample energy window")
    detection_duration_hours: float = Field(default=0.05, ge=0, description="Detection energy window")
    collection_duration_hours: float = Field(
        default=2.0 / 3600.0,
        ge=0,
        description="Conveyor energy window per item",
    )


class ThresholdsConfig(BaseModel):
    """Battery and water-quality thresholds."""

    collection_percent: float = Field(
        default=20.0,
        ge=0,
        le=100,
        description="Waste collection runs only above this battery level",
    )
    critical_percent: float = Field(
        default=5.0,
        ge=0,
        lt=100,
        description="Shutdown at or below this battery level",
    )
    ph_min: float = Field(default=6.5, ge=0, le=14, description="Lowest acceptable pH")
    ph_max: float = Field(default=8.5, ge=0, le=14, description="Highest acceptable pH")
    turbidity_max_ntu: float = Field(default=50.0, ge=0, description="Turbidity alarm level")


class DatasetsConfig(BaseModel):
    """Dataset and image locations."""

    waste_path: str = Field(
        default="./data/waste_detection_dataset.csv",
        description="Path to the waste dataset CSV",
    )
    marine_path: str = Field(
        default="./data/marine_animal_dataset.csv",
        description="Path to the marine dataset CSV",
    )
    image_root: Optional[str] = Field(
        default=None,
        description="Directory with dataset images (None = no image lookup)",
    )


class EventLogConfig(BaseModel):
    """Operator event log."""

    path: str = Field(default="aquatic_monitor_log.txt", description="Append-only event log file")
    console: bool = Field(default=True, description="Mirror events to stdout")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="text", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for the aquatic monitor.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    system: SystemConfig = Field(default_factory=SystemConfig)
    power: PowerConfig = Field(default_factory=PowerConfig)
    conveyor: ConveyorConfig = Field(default_factory=ConveyorConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    thresholds: ThresholdsConfig = Field(default_factory=ThresholdsConfig)
    datasets: DatasetsConfig = Field(default_factory=DatasetsConfig)
    event_log: EventLogConfig = Field(default_factory=EventLogConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    # Find config file
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    # Load from YAML if exists
    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    # Apply environment variable overrides
    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Logging settings
    if env_log := os.environ.get("AQUA_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log

    # Event log
    if env_events := os.environ.get("AQUA_EVENT_LOG_PATH"):
        config_data.setdefault("event_log", {})["path"] = env_events

    # Datasets
    if env_waste := os.environ.get("AQUA_WASTE_DATASET"):
        config_data.setdefault("datasets", {})["waste_path"] = env_waste
    if env_marine := os.environ.get("AQUA_MARINE_DATASET"):
        config_data.setdefault("datasets", {})["marine_path"] = env_marine
    if env_images := os.environ.get("AQUA_IMAGE_ROOT"):
        config_data.setdefault("datasets", {})["image_root"] = env_images

    # Timing
    if env_duration := os.environ.get("AQUA_RUN_DURATION"):
        config_data.setdefault("system", {})["run_duration_seconds"] = float(env_duration)
    if env_tick := os.environ.get("AQUA_TICK_SECONDS"):
        config_data.setdefault("schedule", {})["tick_seconds"] = float(env_tick)


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
