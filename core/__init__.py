"""
Core module shared by the owners, approvals and licenses apps.

This module handles:
- Domain exceptions, enums and events
- Unit of work and the in-process event bus
- Notification dispatch and request-origin context
- Metrics, periodic sweeps and health endpoints
"""
