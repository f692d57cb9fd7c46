"""End-to-end game flow: calibrate six zones, then play full combo passes."""
import threading

import pytest

from speed_reflex.core.entities import GamePhase
from speed_reflex.services.game_loop import GameLoop
from speed_reflex.services.game_state import GameStateMachine
from speed_reflex.services.geometry_store import GeometryStore
from speed_reflex.services.play_session import PlaySessionController
from tests.conftest import detection_for

pytestmark = pytest.mark.integration


def test_combo_pass_over_unit_squares(unit_zone_set, combo, clock):
    controller = PlaySessionController(unit_zone_set, combo, clock=clock)
    steps_seen = [controller.cursor.step]
    samples = []

    assert controller.best_pass_seconds is None
    for step in combo.steps:
        clock.advance(0.4)
        overlay = controller.process([detection_for(unit_zone_set[step])])
        steps_seen.append(controller.cursor.step)
        if overlay.completed_pass:
            samples.append(overlay.completed_pass.seconds)

    assert steps_seen == [0, 1, 2, 3, 4, 5, 6, 7, 0]
    assert len(samples) == 1
    assert controller.best_pass_seconds == samples[0]


def test_calibrate_then_play_through_loop(config, clock, mock_camera, mock_detector, unit_zone_rects, unit_zone_set, combo):
    """Drive the real loop: hold each zone, then punch the combo twice."""
    config.calibration_hold_seconds = 1.0
    store = GeometryStore(config.geometry_file)
    game = GameStateMachine(store, config, clock=clock)
    loop = GameLoop(mock_camera, mock_detector, game)

    script = []
    for rect in unit_zone_rects:
        script.extend([rect] * 4)
    for _ in range(2):
        script.extend(unit_zone_set[step] for step in combo.steps)

    frames = iter(script)
    stop_event = threading.Event()
    passes = []

    def next_detection(_frame):
        clock.advance(0.5)
        return [detection_for(next(frames))]

    def on_overlay(overlay):
        if overlay.completed_pass:
            passes.append(overlay.completed_pass)
        if len(passes) == 2:
            stop_event.set()

    mock_detector.predict.side_effect = next_detection
    loop.add_listener(on_overlay)
    loop.run(stop_event)

    assert game.phase is GamePhase.PLAY
    assert GeometryStore(config.geometry_file).load() == unit_zone_set
    assert len(passes) == 2
    assert passes[1].best_seconds == min(p.seconds for p in passes)


def test_saved_geometry_skips_calibration_on_next_run(config, clock, store, sample_zone_set):
    store.save(sample_zone_set)
    game = GameStateMachine(GeometryStore(config.geometry_file), config, clock=clock)
    assert game.start() is GamePhase.PLAY
    assert game.controller.current_target.name == "JAB"
