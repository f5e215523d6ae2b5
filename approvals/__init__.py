"""
Approvals module - License change requests.

This module handles:
- LicenseApproval entity and domain logic
- Approval workflow (submit, process, expire, remind)
- Auto-approval criteria
"""
