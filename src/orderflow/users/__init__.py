"""orderflow users: ユーザーサービス（リモートエンティティ）とその HTTP クライアント。"""

from .client import UsersClient
from .exceptions import UserError, UserErrorCodes
from .http_client import HttpUsersClient
from .memory import InMemoryUserStore
from .models import User, UsersClientConfig
from .service import UserService
from .store import UserStore

__all__ = [
    "HttpUsersClient",
    "InMemoryUserStore",
    "User",
    "UserError",
    "UserErrorCodes",
    "UserService",
    "UserStore",
    "UsersClient",
    "UsersClientConfig",
]
