"""User entity module.

- User: domain entity carrying the encrypted sensitive id
- UserTable: database persistence model
- UserRepository: data access layer
"""

from .entity import User
from .repository import UserRepository
from .table import UserTable

__all__ = ["User", "UserTable", "UserRepository"]
