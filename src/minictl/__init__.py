"""Local process-lifecycle controller for template-based projects."""

__version__ = "0.1.0"
