"""Helpers shared across integrations: logging, secrets, datetime parsing."""
