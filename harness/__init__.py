"""Acceptance harness — host provisioning helpers for acceptance runs."""

__version__ = "0.1.0"
