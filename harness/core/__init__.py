"""Core layer — configuration, models, and provisioning services."""
