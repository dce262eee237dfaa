"""Average review and merge times for GitHub pull requests."""

__version__ = "0.1.0"
