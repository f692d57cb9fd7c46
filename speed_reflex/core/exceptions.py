"""Custom exceptions for the application."""

class ApplicationError(Exception):
    """Base application error."""
    pass

class ConfigError(ApplicationError):
    """Configuration-related errors."""
    pass

class DetectionError(ApplicationError):
    """Base exception for detection-related errors."""
    pass

class ModelError(DetectionError):
    """Model loading/inference errors."""
    pass

class WebcamError(ApplicationError):
    """Webcam access and frame capture errors."""
    pass

class GeometryStoreError(ApplicationError):
    """Zone geometry could not be read or written."""
    pass

class GeometryNotFoundError(GeometryStoreError):
    """No persisted zone geometry exists (or it cannot be opened)."""
    pass

class MalformedGeometryError(GeometryStoreError):
    """Persisted zone geometry exists but is not a valid six-zone record."""
    pass
