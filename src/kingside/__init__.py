"""kingside: chess rules engine with a deterministic fallback bot."""

__version__ = "0.1.0"
