"""HPMA personality assessment scoring engine."""

__version__ = "1.0.0"
