"""Unit tests for phase selection and frame dispatch."""
import pytest

from speed_reflex.core.entities import GamePhase
from speed_reflex.services.calibration import CalibrationController
from speed_reflex.services.game_state import GameStateMachine
from speed_reflex.services.play_session import PlaySessionController
from tests.conftest import detection_for


@pytest.fixture
def machine(store, config, clock):
    config.calibration_hold_seconds = 1.0
    return GameStateMachine(store, config, clock=clock)


def calibrate_all(machine, clock, rects):
    for rect in rects:
        for _ in range(4):
            machine.process_frame([detection_for(rect)])
            clock.advance(0.5)


def test_must_start_before_processing(machine):
    with pytest.raises(RuntimeError):
        machine.process_frame([])


def test_missing_geometry_starts_calibration(machine):
    assert machine.start() is GamePhase.CALIBRATION
    assert machine.zone_set is None
    assert isinstance(machine.controller, CalibrationController)


def test_malformed_geometry_starts_calibration(machine, store):
    store.path.write_text("1,2,3", encoding="utf-8")
    assert machine.start() is GamePhase.CALIBRATION


def test_valid_geometry_starts_play(machine, store, sample_zone_set):
    store.save(sample_zone_set)
    assert machine.start() is GamePhase.PLAY
    assert machine.zone_set == sample_zone_set
    assert isinstance(machine.controller, PlaySessionController)


def test_calibration_transitions_to_play_once(machine, clock, store, unit_zone_rects, unit_zone_set):
    machine.start()
    calibrate_all(machine, clock, unit_zone_rects)

    assert machine.phase is GamePhase.PLAY
    assert machine.zone_set == unit_zone_set
    assert store.load() == unit_zone_set
    assert machine.controller.geometry_saved


def test_play_never_returns_to_calibration(machine, store, sample_zone_set, clock):
    store.save(sample_zone_set)
    machine.start()
    for _ in range(20):
        machine.process_frame([])
        clock.advance(1.0)
    assert machine.phase is GamePhase.PLAY


def test_frames_are_routed_to_active_controller(machine, store, sample_zone_set):
    machine.start()
    assert machine.process_frame([]).phase is GamePhase.CALIBRATION

    store.save(sample_zone_set)
    machine.start()
    assert machine.process_frame([]).phase is GamePhase.PLAY


def test_binary_geometry_starts_calibration(machine, store):
    store.path.write_bytes(b"\xff\xfe\x00garbage,1,2")
    assert machine.start() is GamePhase.CALIBRATION
    assert machine.zone_set is None


def test_non_finite_geometry_starts_calibration(machine, store):
    store.path.write_text(",".join(["nan"] * 24), encoding="utf-8")
    assert machine.start() is GamePhase.CALIBRATION
