"""Configuration — settings, TOML discovery, and structured logging setup."""
