"""autolabel - label issues and pull requests from regex filters."""

__version__ = "0.1.0"
