"""Configuration layer: settings sources and logging setup."""
