"""
OwnerManagement repository port (interface).

This defines the contract for owner governance record persistence.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from owners.domain.owner_management import OwnerManagement


class OwnerManagementRepository(ABC):
    """
    Abstract repository for OwnerManagement entities.
    """

    @abstractmethod
    async def get_or_create_default(self, owner_id: str) -> OwnerManagement:
        """
        Return the owner's record, creating the default one if absent.

        Safe under concurrent first calls: exactly one record is created.

        Args:
            owner_id: Owner user id

        Returns:
            OwnerManagement entity
        """
        pass

    @abstractmethod
    async def find_by_owner_id(self, owner_id: str) -> Optional[OwnerManagement]:
        """
        Find an owner record without provisioning it.

        Args:
            owner_id: Owner user id

        Returns:
            OwnerManagement entity or None if not found
        """
        pass

    @abstractmethod
    async def find_all(self) -> List[OwnerManagement]:
        """
        List every owner record.

        Returns:
            List of OwnerManagement entities
        """
        pass

    @abstractmethod
    async def find_with_auto_approval(self) -> List[OwnerManagement]:
        """
        List owner records that have auto-approval enabled.

        Returns:
            List of OwnerManagement entities, oldest first
        """
        pass

    @abstractmethod
    async def save(self, record: OwnerManagement) -> OwnerManagement:
        """
        Save an owner record.

        Args:
            record: OwnerManagement entity to save

        Returns:
            Saved OwnerManagement entity
        """
        pass
