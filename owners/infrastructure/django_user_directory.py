"""
User directory backed by the Django auth user model.
"""
from asgiref.sync import sync_to_async
from django.contrib.auth import get_user_model

from owners.ports.user_directory import UserDirectory


class DjangoUserDirectory(UserDirectory):
    """
    Resolves user ids against the configured AUTH_USER_MODEL.

    User ids are matched on the model's USERNAME_FIELD.
    """

    @sync_to_async
    def user_exists(self, user_id: str) -> bool:
        user_model = get_user_model()
        return user_model.objects.filter(**{user_model.USERNAME_FIELD: user_id}).exists()
