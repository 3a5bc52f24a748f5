"""Daily activity tracking for Claude Code session logs."""

__version__ = "0.1.0"
