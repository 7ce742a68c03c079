"""Core infrastructure: timezone resolution and configuration."""
