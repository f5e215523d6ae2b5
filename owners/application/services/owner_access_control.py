"""
Owner access control service.

Guards every owner-restricted operation. Governance records are
provisioned lazily: an owner without a record is "not yet provisioned",
never "without permission".
"""
import logging
from typing import Any, Mapping, Optional

from core.domain.exceptions import PermissionDeniedError, UserNotFoundError
from core.domain.value_objects import OwnerPermission
from owners.domain.owner_management import OwnerManagement, OwnerPermissions, OwnerSettings
from owners.ports.owner_management_repository import OwnerManagementRepository
from owners.ports.user_directory import UserDirectory

logger = logging.getLogger(__name__)


class OwnerAccessControl:
    """Authorizes owner-only operations and manages owner records."""

    def __init__(
        self,
        owner_repository: OwnerManagementRepository,
        user_directory: Optional[UserDirectory] = None,
    ):
        """
        Initialize service.

        Args:
            owner_repository: Owner record repository
            user_directory: Optional user directory; unknown users are
                refused before a record is provisioned
        """
        self.owner_repository = owner_repository
        self.user_directory = user_directory

    async def get_or_provision(self, owner_id: str) -> OwnerManagement:
        """
        Return the owner's record, provisioning the default one if needed.

        Raises:
            UserNotFoundError: If the user directory does not know owner_id
        """
        if self.user_directory is not None and not await self.user_directory.user_exists(owner_id):
            raise UserNotFoundError(f"User {owner_id} not found")
        return await self.owner_repository.get_or_create_default(owner_id)

    async def validate_owner_permission(
        self, user_id: str, permission: OwnerPermission
    ) -> OwnerManagement:
        """
        Require a capability of the acting user.

        Args:
            user_id: Acting user id
            permission: Required capability

        Returns:
            The acting user's owner record

        Raises:
            PermissionDeniedError: If the capability flag is off
            UserNotFoundError: If the user directory does not know user_id
        """
        record = await self.get_or_provision(user_id)
        if not record.has_permission(permission):
            logger.warning(
                "Permission %s denied for user %s",
                permission.value,
                user_id,
                extra={"user_id": user_id, "permission": permission.value},
            )
            raise PermissionDeniedError(permission.value)
        logger.debug("Permission %s granted for user %s", permission.value, user_id)
        return record

    async def check_owner_permission(
        self, user_id: str, permission: OwnerPermission
    ) -> bool:
        try:
            await self.validate_owner_permission(user_id, permission)
        except PermissionDeniedError:
            return False
        return True

    async def get_owner_permissions(self, owner_id: str) -> Optional[OwnerPermissions]:
        record = await self.owner_repository.find_by_owner_id(owner_id)
        return record.permissions if record else None

    async def get_owner_settings(self, owner_id: str) -> Optional[OwnerSettings]:
        record = await self.owner_repository.find_by_owner_id(owner_id)
        return record.settings if record else None

    async def update_owner_permissions(
        self,
        acting_owner_id: str,
        target_owner_id: str,
        changes: Mapping[str, bool],
    ) -> OwnerManagement:
        """
        Change capability flags of an owner.

        Args:
            acting_owner_id: Owner performing the change
            target_owner_id: Owner whose flags change
            changes: Mapping of permission name to flag

        Returns:
            Updated owner record
        """
        await self.validate_owner_permission(
            acting_owner_id, OwnerPermission.DELEGATE_PERMISSIONS
        )
        target = await self.get_or_provision(target_owner_id)
        updated = await self.owner_repository.save(target.with_permissions(changes))
        logger.info(
            "Owner permissions updated",
            extra={
                "acting_owner_id": acting_owner_id,
                "owner_id": target_owner_id,
                "changes": dict(changes),
            },
        )
        return updated

    async def update_owner_settings(
        self, owner_id: str, changes: Mapping[str, Any]
    ) -> OwnerManagement:
        """
        Change an owner's own settings.

        Args:
            owner_id: Owner user id
            changes: Mapping of setting name to value

        Returns:
            Updated owner record
        """
        record = await self.get_or_provision(owner_id)
        updated = await self.owner_repository.save(record.with_settings(changes))
        logger.info(
            "Owner settings updated",
            extra={"owner_id": owner_id, "settings": sorted(changes)},
        )
        return updated

    async def delegate_user(self, owner_id: str, user_id: str) -> OwnerManagement:
        record = await self.validate_owner_permission(
            owner_id, OwnerPermission.DELEGATE_PERMISSIONS
        )
        if self.user_directory is not None and not await self.user_directory.user_exists(user_id):
            raise UserNotFoundError(f"User {user_id} not found")
        updated = record.delegate(user_id)
        if updated is record:
            return record
        logger.info("User %s delegated by owner %s", user_id, owner_id)
        return await self.owner_repository.save(updated)

    async def remove_delegated_user(self, owner_id: str, user_id: str) -> OwnerManagement:
        record = await self.validate_owner_permission(
            owner_id, OwnerPermission.DELEGATE_PERMISSIONS
        )
        updated = record.revoke_delegation(user_id)
        if updated is record:
            return record
        logger.info("Delegation of user %s removed by owner %s", user_id, owner_id)
        return await self.owner_repository.save(updated)

    async def is_delegated_user(self, owner_id: str, user_id: str) -> bool:
        record = await self.owner_repository.find_by_owner_id(owner_id)
        return bool(record and record.is_delegated(user_id))

    async def can_user_access_license(self, user_id: str, license_owner_id: str) -> bool:
        """
        Check whether a user may act on licenses of an owner.

        Args:
            user_id: Acting user id
            license_owner_id: Owner who issued the license

        Returns:
            True for the owner themselves or a user they delegated to
        """
        if user_id == license_owner_id:
            return True
        return await self.is_delegated_user(license_owner_id, user_id)

    async def validate_license_access(self, user_id: str, license_owner_id: str) -> None:
        if not await self.can_user_access_license(user_id, license_owner_id):
            raise PermissionDeniedError(
                "license_access",
                f"User {user_id} has no access to licenses of owner {license_owner_id}",
            )
