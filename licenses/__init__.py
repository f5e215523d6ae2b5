"""
Licenses module - License lifecycle, validation, templates and audit.

This module handles:
- License entity and its state machine
- License key generation
- License templates
- License validation (status, validity window, features, limits)
- License lifecycle orchestration (create, activate, renew, suspend, revoke)
- Append-only license audit log
"""
