"""Pre-session code-health briefing for JavaScript and TypeScript repositories."""

__version__ = "1.0.0"
