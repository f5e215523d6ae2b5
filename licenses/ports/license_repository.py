"""
License repository port (interface).

This defines the contract for license persistence operations.
Implementations are in the infrastructure layer.
"""
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
import uuid

from core.domain.value_objects import LicenseStatus, LicenseType
from licenses.domain.license import License


class LicenseRepository(ABC):
    """
    Abstract repository for License entities.

    This is a port in hexagonal architecture - it defines
    what operations are available, not how they're implemented.
    """

    @abstractmethod
    async def add(self, license: License) -> License:
        """
        Insert a new license.

        Args:
            license: License entity to insert

        Returns:
            Saved license entity

        Raises:
            LicenseKeyConflictError: If the license key is already taken
        """
        pass

    @abstractmethod
    async def update(self, license: License) -> License:
        """
        Update a license if nobody updated it since it was read.

        The stored version must equal `license.version`; the stored
        version is incremented.

        Args:
            license: License entity carrying the version it was read at

        Returns:
            Saved license entity with its new version

        Raises:
            ConcurrentModificationError: If the stored version differs
        """
        pass

    @abstractmethod
    async def find_by_id(self, license_id: uuid.UUID) -> Optional[License]:
        """
        Find a license by ID.

        Args:
            license_id: License UUID

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_license_key(self, license_key: str) -> Optional[License]:
        """
        Find a license by its key.

        Args:
            license_key: License key string

        Returns:
            License entity or None if not found
        """
        pass

    @abstractmethod
    async def key_exists(self, license_key: str) -> bool:
        """
        Check if a license key is taken.

        Args:
            license_key: License key string

        Returns:
            True if a license uses the key, False otherwise
        """
        pass

    @abstractmethod
    async def find_by_issued_to(self, user_id: str) -> List[License]:
        """
        Find all licenses issued to a user, newest first.

        Args:
            user_id: Holder user id

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def find_children(self, parent_license_id: uuid.UUID) -> List[License]:
        """
        Find the direct sub-licenses of a license.

        Args:
            parent_license_id: Parent license UUID

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def find_expirable(self, now: datetime) -> List[License]:
        """
        Find active licenses whose validity ended before now.

        Args:
            now: Reference time

        Returns:
            List of License entities
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Count every license."""
        pass

    @abstractmethod
    async def count_by_status(self, status: LicenseStatus) -> int:
        """
        Count licenses in a status.

        Args:
            status: License status

        Returns:
            Number of licenses
        """
        pass

    @abstractmethod
    async def count_by_type(self, license_type: LicenseType) -> int:
        """
        Count licenses of a type.

        Args:
            license_type: License type

        Returns:
            Number of licenses
        """
        pass
