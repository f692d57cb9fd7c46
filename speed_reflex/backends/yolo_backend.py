"""YOLO backend implementation using Ultralytics."""
import logging
from typing import Any, Dict, List
import numpy as np
from ultralytics import YOLO
from .base_backend import BaseBackend
from ..core.entities import Detection, BBox
from ..core.exceptions import ModelError

logger = logging.getLogger(__name__)

class YoloBackend(BaseBackend):
    """Glove detector backed by an Ultralytics YOLO model."""

    def __init__(self, config: Dict[str, Any]):
        super().__init__(config)
        self.model = None
        self.model_path = None

    def load_model(self, model_path_or_name: str) -> bool:
        """Load a YOLO model from path or model name."""
        try:
            self.model = YOLO(model_path_or_name)
        except Exception as e:
            self.is_loaded = False
            raise ModelError(f"Failed to load YOLO model {model_path_or_name}: {e}") from e

        self.model_path = model_path_or_name
        self.is_loaded = True
        self.model_info = {
            'backend': 'ultralytics',
            'model_type': 'YOLO',
            'model_path': model_path_or_name,
            'device': str(self.model.device) if hasattr(self.model, 'device') else 'unknown'
        }
        logger.info(f"Loaded detector {model_path_or_name}: {self.num_classes} classes, "
                    f"up to {self.max_bounding_boxes} boxes per frame")
        return True

    @property
    def max_bounding_boxes(self) -> int:
        return int(self.config.get('max_detections', 100))

    @property
    def num_classes(self) -> int:
        if self.model is None or not hasattr(self.model, 'names'):
            return 0
        return len(self.model.names)

    def predict(self, image: np.ndarray, **kwargs) -> List[Detection]:
        """Run YOLO inference on an image."""
        if not self.is_loaded or not self.model:
            raise ModelError("No model loaded")

        conf_threshold = kwargs.get('conf', self.config.get('detection_confidence_threshold', 0.25))
        iou_threshold = kwargs.get('iou', self.config.get('detection_iou_threshold', 0.45))

        try:
            results = self.model(
                image,
                conf=conf_threshold,
                iou=iou_threshold,
                max_det=self.max_bounding_boxes,
                verbose=False
            )
        except Exception as e:
            raise ModelError(f"YOLO prediction failed: {e}") from e

        names = getattr(self.model, 'names', {}) or {}
        detections = []
        for result in results:
            boxes = result.boxes
            if boxes is None:
                continue
            for xyxy, score, cls in zip(boxes.xyxy.cpu().numpy(), boxes.conf.cpu().numpy(), boxes.cls.cpu().numpy()):
                class_id = int(cls)
                bbox: BBox = tuple(float(v) for v in xyxy[:4])
                detections.append(Detection(class_id, float(score), bbox, names.get(class_id)))

        detections.sort(key=lambda d: d.score, reverse=True)
        return detections[:self.max_bounding_boxes]

    def get_model_info(self) -> Dict[str, Any]:
        """Get information about the loaded YOLO model."""
        if not self.is_loaded:
            return {'status': 'not_loaded'}

        info = self.model_info.copy()
        info['num_classes'] = self.num_classes
        info['max_bounding_boxes'] = self.max_bounding_boxes
        return info

    def unload_model(self) -> None:
        """Unload the current YOLO model."""
        self.model = None
        super().unload_model()
        self.model_path = None
