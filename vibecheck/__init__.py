"""VibeCheck: security hotspot triage and prompt preparation for AI code review."""

__version__ = "0.1.0"
