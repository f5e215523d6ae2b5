"""
Owners module - Owner governance.

This module handles:
- OwnerManagement records (permissions, delegation, settings)
- Owner access control for owner-restricted operations
- User directory lookups
"""
