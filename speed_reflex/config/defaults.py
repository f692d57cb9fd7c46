"""Default configuration values."""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    # Camera settings
    "camera_index": 0,
    "camera_width": 1280,
    "camera_height": 720,
    "camera_fps": 30,
    "capture_timeout_ms": 1000,

    # Detector settings
    "model_path": "data/models/boxing_glove.pt",
    "detection_confidence_threshold": 0.25,  # passed to the detector itself
    "detection_iou_threshold": 0.45,
    "max_detections": 100,

    # Calibration settings
    "calibration_confidence_threshold": 0.6,
    "calibration_hold_seconds": 3.0,
    "calibration_max_misses": 5,
    "calibration_tolerance_px": 15.0,

    # Play settings
    "play_tolerance_px": 2.0,
    "combo_script": [0, 1, 0, 0, 1, 0, 1, 2],

    # Zone geometry persistence
    "geometry_file": "game.settings.txt",
    "geometry_save_retries": 3,

    # Display settings
    "show_window": True,
    "window_name": "Speed Reflex",

    # Debug and Logging Settings
    "debug": False,
    "log_level": "INFO",
    "log_dir": "logs",
    "enable_file_logging": True,
    "structured_logging": False,
}
