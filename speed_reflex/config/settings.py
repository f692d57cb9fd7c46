"""Configuration dataclass and loading utilities.

Provides a strongly-typed configuration object that is injected into the
game services instead of module-level constants. Values are resolved in
this order: defaults, ``config.json``, then ``SPEED_REFLEX_*`` environment
variables. Nothing here is fatal: a missing or broken file means defaults.
"""
from __future__ import annotations
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Mapping, Optional
import json, os, logging
from .defaults import DEFAULT_CONFIG
from ..core.entities import ComboScript
from ..core.exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "SPEED_REFLEX_"

@dataclass(slots=True)
class Config:
    # Camera settings
    camera_index: int = DEFAULT_CONFIG["camera_index"]
    camera_width: int = DEFAULT_CONFIG["camera_width"]
    camera_height: int = DEFAULT_CONFIG["camera_height"]
    camera_fps: int = DEFAULT_CONFIG["camera_fps"]
    capture_timeout_ms: int = DEFAULT_CONFIG["capture_timeout_ms"]

    # Detector settings
    model_path: str = DEFAULT_CONFIG["model_path"]
    detection_confidence_threshold: float = DEFAULT_CONFIG["detection_confidence_threshold"]
    detection_iou_threshold: float = DEFAULT_CONFIG["detection_iou_threshold"]
    max_detections: int = DEFAULT_CONFIG["max_detections"]

    # Calibration settings
    calibration_confidence_threshold: float = DEFAULT_CONFIG["calibration_confidence_threshold"]
    calibration_hold_seconds: float = DEFAULT_CONFIG["calibration_hold_seconds"]
    calibration_max_misses: int = DEFAULT_CONFIG["calibration_max_misses"]
    calibration_tolerance_px: float = DEFAULT_CONFIG["calibration_tolerance_px"]

    # Play settings
    play_tolerance_px: float = DEFAULT_CONFIG["play_tolerance_px"]
    combo_script: List[int] = field(default_factory=lambda: list(DEFAULT_CONFIG["combo_script"]))

    # Zone geometry persistence
    geometry_file: str = DEFAULT_CONFIG["geometry_file"]
    geometry_save_retries: int = DEFAULT_CONFIG["geometry_save_retries"]

    # Display settings
    show_window: bool = DEFAULT_CONFIG["show_window"]
    window_name: str = DEFAULT_CONFIG["window_name"]

    # Debug and Logging Settings
    debug: bool = DEFAULT_CONFIG["debug"]
    log_level: str = DEFAULT_CONFIG["log_level"]
    log_dir: str = DEFAULT_CONFIG["log_dir"]
    enable_file_logging: bool = DEFAULT_CONFIG["enable_file_logging"]
    structured_logging: bool = DEFAULT_CONFIG["structured_logging"]

    # Arbitrary extra values retained for forward compatibility
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        # merge extra keys at top-level for saving
        extra = d.pop("extra", {})
        d.update(extra)
        return d

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.__dataclass_fields__ and key != "extra":
            return getattr(self, key)
        return self.extra.get(key, default)

    def get_combo_script(self) -> ComboScript:
        try:
            return ComboScript.from_sequence(self.combo_script)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid combo_script {self.combo_script!r}: {e}") from e


def load_config(path: str = "config.json", environ: Optional[Mapping[str, str]] = None) -> Config:
    """Load configuration from a JSON file, falling back to defaults on any problem.

    Args:
        path: Path to config.json file
        environ: Environment mapping used for overrides (defaults to os.environ)

    Returns:
        Config: Loaded and sanitised configuration
    """
    data: Dict[str, Any] = {}

    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded_data = json.load(f)
            if loaded_data is None:
                logger.warning(f"Configuration file '{path}' is empty, using defaults")
            elif not isinstance(loaded_data, dict):
                logger.error(f"Configuration file '{path}' does not contain a valid JSON object, using defaults")
            else:
                data = loaded_data
                logger.info(f"Successfully loaded configuration from '{path}'")
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON configuration file '{path}': {e}. Using defaults.")
        except PermissionError:
            logger.error(f"Permission denied reading configuration file '{path}'. Using defaults.")
        except OSError as e:
            logger.error(f"Error reading configuration file '{path}': {e}. Using defaults.")
    else:
        logger.info(f"Configuration file '{path}' does not exist. Using defaults.")

    merged = {**DEFAULT_CONFIG, **data}
    merged = _apply_environment_overrides(merged, os.environ if environ is None else environ)
    merged = _sanitize_config_values(merged)

    # capture unknown keys
    known = set(Config.__dataclass_fields__) - {"extra"}
    extra = {k: v for k, v in merged.items() if k not in known}
    if extra:
        logger.info(f"Found extra configuration keys: {list(extra.keys())}")

    try:
        return Config(**{k: merged[k] for k in known}, extra=extra)
    except TypeError as e:
        logger.error(f"Failed to create configuration object: {e}. Falling back to pure defaults.")
        return Config()


def save_config(cfg: Config, path: str = "config.json") -> None:
    """Save configuration to a JSON file. Failures are logged, not raised."""
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(cfg.to_dict(), f, indent=2, ensure_ascii=False)
        logger.info(f"Configuration saved successfully to '{path}'")
    except PermissionError:
        logger.error(f"Permission denied writing configuration file '{path}'")
    except OSError as e:
        logger.error(f"OS error saving configuration file '{path}': {e}")


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _apply_environment_overrides(config_dict: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    """Apply SPEED_REFLEX_* environment variable overrides to configuration.

    Args:
        config_dict: Base configuration dictionary
        environ: Environment mapping

    Returns:
        dict: Updated configuration with environment overrides
    """
    overrides = dict(config_dict)

    model_path = environ.get(f"{ENV_PREFIX}MODEL_PATH")
    if model_path:
        overrides["model_path"] = model_path

    geometry_file = environ.get(f"{ENV_PREFIX}GEOMETRY_FILE")
    if geometry_file:
        overrides["geometry_file"] = geometry_file

    camera_index = environ.get(f"{ENV_PREFIX}CAMERA_INDEX")
    if camera_index:
        try:
            overrides["camera_index"] = int(camera_index)
        except ValueError:
            logger.warning(f"Ignoring non-integer {ENV_PREFIX}CAMERA_INDEX={camera_index!r}")

    log_level = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        overrides["log_level"] = log_level.upper()

    debug = environ.get(f"{ENV_PREFIX}DEBUG")
    if debug and _parse_bool(debug):
        overrides["debug"] = True
        overrides["log_level"] = "DEBUG"

    return overrides


def _sanitize_config_values(config_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Replace out-of-range or mistyped values with their defaults.

    Args:
        config_dict: Configuration dictionary to sanitize

    Returns:
        dict: Sanitized configuration dictionary
    """
    sanitized = config_dict.copy()

    numeric_validations = {
        'camera_fps': (1, 240),
        'capture_timeout_ms': (1, 60000),
        'detection_confidence_threshold': (0.0, 1.0),
        'detection_iou_threshold': (0.0, 1.0),
        'max_detections': (1, 1000),
        'calibration_confidence_threshold': (0.0, 1.0),
        'calibration_hold_seconds': (0.0, 60.0),
        'calibration_max_misses': (1, 1000),
        'calibration_tolerance_px': (0.0, 10000.0),
        'play_tolerance_px': (0.0, 10000.0),
        'geometry_save_retries': (1, 100),
    }

    for key, (min_val, max_val) in numeric_validations.items():
        value = sanitized.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning(f"Value {key}={value!r} is not a number, using default")
            sanitized[key] = DEFAULT_CONFIG[key]
        elif not (min_val <= value <= max_val):
            logger.warning(f"Value {key}={value} out of range [{min_val}, {max_val}], using default")
            sanitized[key] = DEFAULT_CONFIG[key]

    for key in ('model_path', 'geometry_file', 'log_dir', 'window_name'):
        value = sanitized.get(key)
        if not isinstance(value, str) or not value.strip():
            logger.warning(f"Setting '{key}' must be a non-empty string. Using default.")
            sanitized[key] = DEFAULT_CONFIG[key]

    try:
        ComboScript.from_sequence(sanitized.get('combo_script') or [])
    except (TypeError, ValueError) as e:
        logger.warning(f"Invalid combo_script {sanitized.get('combo_script')!r}: {e}. Using default.")
        sanitized['combo_script'] = list(DEFAULT_CONFIG['combo_script'])

    return sanitized
