"""WP Starter step selection: configuration validation and selected steps resolution."""

__version__ = "0.1.0"
