"""Configuration loading (harness.yml)."""
