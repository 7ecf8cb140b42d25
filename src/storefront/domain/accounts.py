"""
Account domain services - self-service profile and admin user management.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from .exceptions import NotFoundError
from .models import User, UserAddress, UserPreference
from .ports import AddressRepository, PreferenceRepository, UserRepository

PROFILE_FIELDS = frozenset({"display_name", "mobile_number"})


class AccountStorage(UserRepository, PreferenceRepository, AddressRepository, Protocol):
    """Storage capabilities account management needs."""


@dataclass
class AccountService:
    """Profile, preferences and addresses of the logged-in user."""

    storage: AccountStorage

    def get_profile(self, user_id: int) -> User:
        user = self.storage.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: int, **changes: Any) -> User:
        """Only display name and mobile number are user-editable."""
        allowed = {k: v for k, v in changes.items() if k in PROFILE_FIELDS}
        return self.storage.update_user(user_id, **allowed)

    def get_preferences(self, user_id: int) -> UserPreference:
        """Stored preferences, or unsaved defaults when none exist yet."""
        preferences = self.storage.get_preferences(user_id)
        return preferences if preferences is not None else UserPreference(user_id=user_id)

    def update_preferences(self, user_id: int, **changes: Any) -> UserPreference:
        changes.pop("user_id", None)
        changes.pop("id", None)
        return self.storage.update_preferences(user_id, **changes)

    def list_addresses(self, user_id: int) -> list[UserAddress]:
        return self.storage.list_addresses(user_id)

    def add_address(self, user_id: int, **fields: Any) -> UserAddress:
        fields.pop("id", None)
        fields["user_id"] = user_id
        return self.storage.create_address(UserAddress(**fields))

    def update_address(self, user_id: int, address_id: int, **changes: Any) -> UserAddress:
        changes.pop("user_id", None)
        changes.pop("id", None)
        return self.storage.update_address(address_id, user_id, **changes)

    def delete_address(self, user_id: int, address_id: int) -> None:
        if not self.storage.delete_address(address_id, user_id):
            raise NotFoundError("Address not found")


@dataclass
class AdminService:
    """User management for administrators."""

    users: UserRepository

    def list_users(self) -> list[User]:
        return self.users.list_users()

    def toggle_suspension(self, user_id: int) -> User:
        user = self._get(user_id)
        return self.users.update_user(user_id, is_suspended=not user.is_suspended)

    def toggle_admin(self, user_id: int) -> User:
        user = self._get(user_id)
        return self.users.update_user(user_id, is_admin=not user.is_admin)

    def _get(self, user_id: int) -> User:
        user = self.users.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
