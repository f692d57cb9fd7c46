"""Unit tests for YoloBackend with the Ultralytics model mocked out."""
import numpy as np
import pytest
from unittest.mock import MagicMock, patch
from speed_reflex.backends.yolo_backend import YoloBackend
from speed_reflex.core.exceptions import ModelError


def tensor(values):
    t = MagicMock()
    t.cpu.return_value.numpy.return_value = np.array(values, dtype=np.float32)
    return t


def fake_result(xyxy, conf, cls):
    result = MagicMock()
    result.boxes.xyxy = tensor(xyxy)
    result.boxes.conf = tensor(conf)
    result.boxes.cls = tensor(cls)
    return result


@pytest.fixture
def model():
    m = MagicMock()
    m.names = {0: "glove", 1: "face"}
    m.device = "cpu"
    return m


@pytest.fixture
def backend(model):
    with patch('speed_reflex.backends.yolo_backend.YOLO', return_value=model):
        b = YoloBackend({'max_detections': 2, 'detection_confidence_threshold': 0.3})
        b.load_model("glove.pt")
    return b


def test_load_reports_capacity(backend):
    assert backend.is_model_loaded()
    assert backend.num_classes == 2
    assert backend.max_bounding_boxes == 2
    assert backend.get_model_info()['model_path'] == "glove.pt"


def test_load_failure_raises_model_error():
    with patch('speed_reflex.backends.yolo_backend.YOLO', side_effect=FileNotFoundError("nope")):
        backend = YoloBackend({})
        with pytest.raises(ModelError):
            backend.load_model("missing.pt")
    assert not backend.is_model_loaded()


def test_predict_converts_and_orders_by_score(backend, model, sample_frame):
    model.return_value = [fake_result(
        [[10, 20, 30, 40], [50, 60, 70, 80], [1, 2, 3, 4]],
        [0.4, 0.9, 0.5],
        [1, 0, 0],
    )]

    detections = backend.predict(sample_frame)

    assert [d.score for d in detections] == pytest.approx([0.9, 0.5])
    assert detections[0].bbox == (50.0, 60.0, 70.0, 80.0)
    assert detections[0].class_name == "glove"
    _, kwargs = model.call_args
    assert kwargs['conf'] == 0.3
    assert kwargs['max_det'] == 2


def test_predict_without_model_raises(sample_frame):
    with pytest.raises(ModelError):
        YoloBackend({}).predict(sample_frame)


def test_inference_error_is_wrapped(backend, model, sample_frame):
    model.side_effect = RuntimeError("CUDA error")
    with pytest.raises(ModelError):
        backend.predict(sample_frame)


def test_unload(backend):
    backend.unload_model()
    assert not backend.is_model_loaded()
    assert backend.num_classes == 0
