"""health: host health checks for the player web service."""

SERVICE_VERSION = "0.1.0"
