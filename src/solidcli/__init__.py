"""solid-cli - Command-line client for the Solid# business platform."""

__version__ = "1.0.0"
