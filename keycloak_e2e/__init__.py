"""Page objects and scenario helpers for Keycloak login end-to-end tests."""

__version__ = "0.1.0"
