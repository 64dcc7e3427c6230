"""Provisioning services.

Each module owns one concern:

    platforms  — platform string → category matching
    packages   — package installation across hosts
    fetch      — idempotent HTTP fetch + recursive directory mirror
    firewall   — best-effort firewall disabling
    repos      — build-specific package repository wiring
"""
