"""Base backend interface for detector implementations."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List
import numpy as np
from ..core.entities import Detection

class BaseBackend(ABC):
    """Abstract base class for detector backends."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.is_loaded = False
        self.model_info: Dict[str, Any] = {}

    @abstractmethod
    def load_model(self, model_path_or_name: str) -> bool:
        """Load a model from path or model name."""
        pass

    @abstractmethod
    def predict(self, image: np.ndarray, **kwargs) -> List[Detection]:
        """Run inference on an image. Detections are ordered by descending score."""
        pass

    @property
    @abstractmethod
    def max_bounding_boxes(self) -> int:
        """Upper bound on detections returned per frame."""
        pass

    @property
    @abstractmethod
    def num_classes(self) -> int:
        pass

    def is_model_loaded(self) -> bool:
        """Check if a model is currently loaded."""
        return self.is_loaded

    def unload_model(self) -> None:
        """Unload the current model to free memory."""
        self.is_loaded = False
        self.model_info = {}
