"""
User directory port (interface).

Read-only lookup of user ids, used for audit attribution and to refuse
provisioning governance records for unknown users.
"""
from abc import ABC, abstractmethod


class UserDirectory(ABC):
    """Abstract read-only user directory."""

    @abstractmethod
    async def user_exists(self, user_id: str) -> bool:
        """
        Check whether a user id is known.

        Args:
            user_id: User id

        Returns:
            True if the user exists, False otherwise
        """
        pass
