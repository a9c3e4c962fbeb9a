"""
User Management Module

Users own accounts. Accounts reference their owner by username.
"""

from dataclasses import dataclass
from typing import List
import re

from .storage import StorageInterface, StorageRecord
from .errors import UserNotFoundError, ValidationError
from .logging_config import get_logger, log_action


logger = get_logger("simple_bank.users")

USERNAME_PATTERN = r'^[a-zA-Z0-9_]{3,32}$'
EMAIL_PATTERN = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'


@dataclass
class User(StorageRecord):
    """Account owner"""
    username: str
    full_name: str
    email: str


class UserStore:
    """Creates and looks up users"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.table_name = "users"

    def create(self, username: str, full_name: str, email: str) -> User:
        """
        Create a new user

        Raises:
            ValidationError: malformed username, name or email
            DuplicateRecordError: username already taken
        """
        if not re.match(USERNAME_PATTERN, username or ""):
            raise ValidationError("username must be 3-32 letters, digits or underscores")
        if not full_name or not full_name.strip():
            raise ValidationError("full_name is required")
        if not re.match(EMAIL_PATTERN, email or ""):
            raise ValidationError("Invalid email format")

        row = self.storage.insert(self.table_name, {
            "username": username,
            "full_name": full_name.strip(),
            "email": email,
        })
        user = User.from_dict(row)

        log_action(
            logger, "info", f"Created user {username}",
            action="create_user", resource=f"user:{user.id}"
        )
        return user

    def get(self, user_id: int) -> User:
        """Get user by id"""
        row = self.storage.load(self.table_name, user_id)
        if row is None:
            raise UserNotFoundError(str(user_id))
        return User.from_dict(row)

    def get_by_username(self, username: str) -> User:
        """Get user by username"""
        rows = self.storage.find(self.table_name, {"username": username}, limit=1)
        if not rows:
            raise UserNotFoundError(username)
        return User.from_dict(rows[0])

    def exists(self, username: str) -> bool:
        return self.storage.count(self.table_name, {"username": username}) > 0

    def list(self, offset: int = 0, limit: int = 50) -> List[User]:
        """List users ordered by id"""
        rows = self.storage.find(self.table_name, offset=offset, limit=limit)
        return [User.from_dict(row) for row in rows]
