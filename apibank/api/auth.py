"""
Authentication and authorization dependencies
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import APIRouter, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..admin_service import AdminService
from ..config import APIBankConfig, get_config
from ..errors import AuthenticationError, ForbiddenError
from ..storage import InMemoryStorage, SQLiteStorage, StorageInterface
from ..users import Principal, RoleName, User, UserRepository
from .schemas import TokenRequest


class BankingSystem:
    """Storage plus the services the API needs"""

    def __init__(self, storage: Optional[StorageInterface] = None,
                 config: Optional[APIBankConfig] = None):
        self.config = config or get_config()
        if storage is None:
            if self.config.use_sqlite:
                storage = SQLiteStorage(self.config.database_path)
            else:
                storage = InMemoryStorage()
        self.storage = storage
        self.admin_service = AdminService(self.storage, self.config)
        self.users = UserRepository(self.storage)


_banking_system: Optional[BankingSystem] = None


def get_banking_system() -> BankingSystem:
    """Dependency returning the process-wide banking system, created on first use"""
    global _banking_system
    if _banking_system is None:
        _banking_system = BankingSystem()
    return _banking_system


security = HTTPBearer(auto_error=False)


def create_access_token(user: User, config: Optional[APIBankConfig] = None) -> str:
    config = config or get_config()
    expires = datetime.now(timezone.utc) + timedelta(hours=config.jwt_expiry_hours)
    payload = {
        "sub": user.id,
        "username": user.username,
        "roles": user.role_names,
        "exp": expires,
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def get_current_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    system: BankingSystem = Depends(get_banking_system)
) -> Principal:
    """Dependency that validates the bearer token and returns the caller"""
    config = system.config
    if not config.auth_enabled:
        return Principal.system()

    if not credentials:
        raise AuthenticationError("Not authenticated")
    try:
        payload = jwt.decode(credentials.credentials, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    return Principal(
        username=payload.get("username", ""),
        roles=frozenset(RoleName(r) for r in payload.get("roles", [])),
        user_id=user_id
    )


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Admin role required")
    return principal


router = APIRouter()


@router.post("/token")
async def issue_token(request: TokenRequest, system: BankingSystem = Depends(get_banking_system)):
    """Exchange username and password for a bearer token"""
    user = system.users.authenticate(request.username, request.password)
    if not user:
        raise AuthenticationError("Invalid username or password")

    return {
        "access_token": create_access_token(user, system.config),
        "token_type": "bearer",
    }
