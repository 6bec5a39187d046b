"""PRD normalization and interview tool."""

__version__ = "0.1.0"
