"""relctl: release orchestration for a packaged command-line tool."""

__version__ = "0.1.0"
