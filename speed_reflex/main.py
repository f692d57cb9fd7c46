"""Main entry point for the Speed Reflex trainer."""

import argparse
import logging
import sys
import threading

from speed_reflex.backends.yolo_backend import YoloBackend
from speed_reflex.config.settings import load_config
from speed_reflex.core.exceptions import ModelError, WebcamError
from speed_reflex.core.logging_config import buffer_startup_logs, configure_logging, start_run
from speed_reflex.services.game_loop import GameLoop, install_signal_handlers
from speed_reflex.services.game_state import GameStateMachine
from speed_reflex.services.geometry_store import GeometryStore
from speed_reflex.services.overlay_renderer import DisplayWindow
from speed_reflex.services.webcam_service import WebcamService

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Boxing glove speed reflex trainer")
    parser.add_argument("--config", default="config.json", help="Path to config.json")
    parser.add_argument("--recalibrate", action="store_true",
                        help="Ignore saved zone geometry and calibrate again")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    buffer_startup_logs()
    run = start_run()
    config = load_config(args.config)

    configure_logging(
        log_level=config.log_level,
        log_dir=config.log_dir,
        enable_file_logging=config.enable_file_logging,
        structured_logging=config.structured_logging,
    )
    logger.info(f"Starting speed reflex run {run}")

    store = GeometryStore(config.geometry_file)
    if args.recalibrate and store.path.exists():
        try:
            store.path.unlink()
        except OSError as e:
            logger.error(f"Cannot remove '{store.path}' for recalibration: {e}")
            return 1
        logger.info(f"Removed '{store.path}' for recalibration")

    detector = YoloBackend(config.to_dict())
    camera = WebcamService.from_config(config)
    try:
        detector.load_model(config.model_path)
        camera.open()
    except (ModelError, WebcamError) as e:
        logger.error(f"Failed to start: {e}")
        camera.close()
        return 1

    game = GameStateMachine(store, config)
    window = DisplayWindow(config.window_name) if config.show_window else None
    loop = GameLoop(camera, detector, game, window=window, capture_timeout_ms=config.capture_timeout_ms)

    stop_event = threading.Event()
    install_signal_handlers(stop_event)
    loop.run(stop_event)
    return 0


if __name__ == "__main__":
    sys.exit(main())
