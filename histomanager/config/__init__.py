"""Configuration module - reads histogram booking files."""
