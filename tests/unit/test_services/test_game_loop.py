"""Unit tests for the frame loop with mocked camera, detector and window."""
import signal
import threading
from unittest.mock import Mock

import pytest

from speed_reflex.core.entities import GamePhase
from speed_reflex.core.exceptions import ModelError, WebcamError
from speed_reflex.services.game_loop import GameLoop, install_signal_handlers
from speed_reflex.services.game_state import GameStateMachine
from tests.conftest import detection_for


@pytest.fixture
def game(store, config, clock):
    machine = GameStateMachine(store, config, clock=clock)
    machine.start()
    return machine


@pytest.fixture
def loop(mock_camera, mock_detector, game):
    return GameLoop(mock_camera, mock_detector, game, capture_timeout_ms=250)


def test_tick_runs_detection_and_game_update(loop, mock_camera, mock_detector, sample_frame):
    overlays = []
    loop.add_listener(overlays.append)

    assert loop.tick() is True

    mock_camera.capture.assert_called_once_with(250)
    mock_detector.predict.assert_called_once_with(sample_frame)
    assert len(overlays) == 1
    assert overlays[0].phase is GamePhase.CALIBRATION
    assert loop.frames_processed == 1


def test_capture_failure_skips_game_update(loop, mock_camera, game):
    mock_camera.capture.side_effect = WebcamError("timeout")
    loop.game = Mock(wraps=game)

    assert loop.tick() is True
    assert loop.frames_skipped == 1
    loop.game.process_frame.assert_not_called()


def test_detector_failure_skips_frame(loop, mock_detector):
    mock_detector.predict.side_effect = ModelError("cuda lost")
    assert loop.tick() is True
    assert loop.frames_skipped == 1
    assert loop.frames_processed == 0


def test_listener_errors_do_not_stop_loop(loop):
    loop.add_listener(Mock(side_effect=ValueError("boom")))
    assert loop.tick() is True


def test_run_stops_when_event_is_set(loop, mock_camera):
    stop_event = threading.Event()
    frames = []

    def stop_after_three(overlay):
        frames.append(overlay)
        if len(frames) == 3:
            stop_event.set()

    loop.add_listener(stop_after_three)
    loop.run(stop_event)

    assert len(frames) == 3
    mock_camera.close.assert_called_once()


def test_run_with_preset_event_processes_nothing(loop, mock_camera, mock_detector):
    stop_event = threading.Event()
    stop_event.set()
    loop.run(stop_event)

    mock_detector.predict.assert_not_called()
    mock_camera.close.assert_called_once()


def test_window_quit_stops_loop(mock_camera, mock_detector, game, unit_zone_rects):
    window = Mock()
    window.name = "test"
    window.show.side_effect = [True, False]
    renderer = Mock()
    mock_detector.predict.return_value = [detection_for(unit_zone_rects[0])]
    loop = GameLoop(mock_camera, mock_detector, game, renderer=renderer, window=window)

    loop.run(threading.Event())

    assert window.show.call_count == 2
    assert renderer.render.call_count == 2
    window.close.assert_called_once()
    window.set_title.assert_called()


def test_signal_handler_sets_event():
    stop_event = threading.Event()
    previous = signal.getsignal(signal.SIGINT)
    try:
        install_signal_handlers(stop_event)
        handler = signal.getsignal(signal.SIGINT)
        handler(signal.SIGINT, None)
        assert stop_event.is_set()
    finally:
        signal.signal(signal.SIGINT, previous)
        if hasattr(signal, "SIGTERM"):
            signal.signal(signal.SIGTERM, signal.SIG_DFL)
