from owners.infrastructure.models import OwnerManagement  # noqa: F401
