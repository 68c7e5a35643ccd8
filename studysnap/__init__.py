"""StudySnap - resilient study-content generation from language models."""

__version__ = "1.0.0"
