"""
License template repository port (interface).
"""
from abc import ABC, abstractmethod
from typing import List, Optional
import uuid

from licenses.domain.template import LicenseTemplate


class LicenseTemplateRepository(ABC):
    """
    Abstract repository for LicenseTemplate entities.
    """

    @abstractmethod
    async def save(self, template: LicenseTemplate) -> LicenseTemplate:
        """
        Save a template.

        Args:
            template: LicenseTemplate entity to save

        Returns:
            Saved template entity

        Raises:
            DuplicateTemplateNameError: If another template has the name
        """
        pass

    @abstractmethod
    async def find_by_id(self, template_id: uuid.UUID) -> Optional[LicenseTemplate]:
        """
        Find a template by ID.

        Args:
            template_id: Template UUID

        Returns:
            LicenseTemplate entity or None if not found
        """
        pass

    @abstractmethod
    async def find_by_name(self, name: str) -> Optional[LicenseTemplate]:
        """
        Find a template by its unique name.

        Args:
            name: Template name

        Returns:
            LicenseTemplate entity or None if not found
        """
        pass

    @abstractmethod
    async def find_active(self) -> List[LicenseTemplate]:
        """
        List active templates ordered by name.

        Returns:
            List of LicenseTemplate entities
        """
        pass
