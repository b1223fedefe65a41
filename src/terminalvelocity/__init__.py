"""Terminal Velocity combat engine."""

__version__ = "0.1.0"
