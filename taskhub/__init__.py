"""Task Hub - task management with ownership checks and an audit trail."""

__version__ = "1.0.0"
