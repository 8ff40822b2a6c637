"""
Domain errors raised by the estimation core.
"""


class FrameCountError(Exception):
    """Base class for all FrameCount errors."""


class DuplicateShotError(FrameCountError):
    """Raised when a shot name is already present in the estimate."""
    def __init__(self, name: str):
        super().__init__(f"Shot name \"{name}\" already exists")
        self.name = name


class ShotNotFoundError(FrameCountError):
    """Raised when a shot id is not part of the estimate."""
    def __init__(self, shot_id: str):
        super().__init__(f"Unknown shot id: {shot_id}")
        self.shot_id = shot_id


class TierInUseError(FrameCountError):
    """Raised when deleting a tier that still prices existing shots."""
    def __init__(self, label: str, shot_count: int):
        super().__init__(
            f"Tier '{label}' still prices {shot_count} shot(s) and cannot be deleted"
        )
        self.label = label
        self.shot_count = shot_count


class ImageAnalysisError(FrameCountError):
    """Raised when the image analysis service cannot produce candidates."""
