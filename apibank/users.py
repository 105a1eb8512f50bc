"""
Identity Module

Admins, account holders and third-party API clients. All three share one
``users`` table, tagged by ``user_type``; what a user may do is decided by the
explicit role list, never by the Python class alone.
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Type

from .storage import StorageInterface, StorageRecord, new_id, utcnow


class RoleName(Enum):
    """Roles a user can hold"""
    ADMIN = "ADMIN"
    ACCOUNT_HOLDER = "ACCOUNT_HOLDER"
    THIRD_PARTY = "THIRD_PARTY"


class UserType(Enum):
    ADMIN = "admin"
    ACCOUNT_HOLDER = "account_holder"
    THIRD_PARTY = "third_party"


@dataclass
class Address:
    """Postal address"""
    street: str
    postal_code: str
    city: str
    country: str

    def __post_init__(self):
        if not self.street or not self.city or not self.country:
            raise ValueError("Address street, city, and country are required")

    def to_dict(self) -> Dict[str, str]:
        return {
            'street': self.street,
            'postal_code': self.postal_code,
            'city': self.city,
            'country': self.country,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, str]]) -> Optional['Address']:
        if not data:
            return None
        return cls(**data)


def generate_salt() -> str:
    return secrets.token_hex(16)


def hash_password(password: str, salt: str) -> str:
    """Hash a password with scrypt"""
    return hashlib.scrypt(
        password.encode(),
        salt=salt.encode(),
        n=16384, r=8, p=1
    ).hex()


def calculate_age(date_of_birth: date, today: date) -> int:
    """Full years between date_of_birth and today"""
    age = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


@dataclass
class User(StorageRecord):
    """Common identity fields shared by every user variant"""
    name: str
    username: str
    password_hash: str
    password_salt: str
    roles: List[RoleName]

    user_type: ClassVar[UserType]

    @staticmethod
    def _new_fields(name: str, username: str, password: str) -> Dict[str, Any]:
        now = utcnow()
        salt = generate_salt()
        return {
            'id': new_id(),
            'created_at': now,
            'updated_at': now,
            'name': name,
            'username': username,
            'password_hash': hash_password(password, salt),
            'password_salt': salt,
            'roles': [],
        }

    def set_password(self, password: str) -> None:
        self.password_salt = generate_salt()
        self.password_hash = hash_password(password, self.password_salt)

    def verify_password(self, password: str) -> bool:
        expected = hash_password(password, self.password_salt)
        return secrets.compare_digest(expected, self.password_hash)

    def has_role(self, role: RoleName) -> bool:
        return role in self.roles

    @property
    def role_names(self) -> List[str]:
        return [role.value for role in self.roles]

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['user_type'] = self.user_type.value
        return result

    @classmethod
    def _common_from_dict(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': data['id'],
            'created_at': datetime.fromisoformat(data['created_at']),
            'updated_at': datetime.fromisoformat(data['updated_at']),
            'name': data['name'],
            'username': data['username'],
            'password_hash': data['password_hash'],
            'password_salt': data['password_salt'],
            'roles': [RoleName(r) for r in data.get('roles', [])],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        return cls(**cls._common_from_dict(data))


@dataclass
class Admin(User):
    """Bank administrator"""
    user_type: ClassVar[UserType] = UserType.ADMIN

    @classmethod
    def create(cls, name: str, username: str, password: str) -> 'Admin':
        return cls(**cls._new_fields(name, username, password))


@dataclass
class AccountHolder(User):
    """Customer who can own accounts"""
    date_of_birth: date
    primary_address: Address
    mail_address: Optional[Address] = None

    user_type: ClassVar[UserType] = UserType.ACCOUNT_HOLDER

    @classmethod
    def create(cls, name: str, username: str, password: str, date_of_birth: date,
               primary_address: Address, mail_address: Optional[Address] = None) -> 'AccountHolder':
        return cls(
            date_of_birth=date_of_birth,
            primary_address=primary_address,
            mail_address=mail_address,
            **cls._new_fields(name, username, password)
        )

    def age_on(self, today: date) -> int:
        return calculate_age(self.date_of_birth, today)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AccountHolder':
        return cls(
            date_of_birth=date.fromisoformat(data['date_of_birth']),
            primary_address=Address.from_dict(data['primary_address']),
            mail_address=Address.from_dict(data.get('mail_address')),
            **cls._common_from_dict(data)
        )


@dataclass
class ThirdParty(User):
    """External API client identified by a hashed key"""
    hashed_key: str

    user_type: ClassVar[UserType] = UserType.THIRD_PARTY

    @classmethod
    def create(cls, name: str, hashed_key: str, password: str, username: str) -> 'ThirdParty':
        return cls(hashed_key=hashed_key, **cls._new_fields(name, username, password))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ThirdParty':
        return cls(hashed_key=data['hashed_key'], **cls._common_from_dict(data))


USER_TYPES: Dict[UserType, Type[User]] = {
    UserType.ADMIN: Admin,
    UserType.ACCOUNT_HOLDER: AccountHolder,
    UserType.THIRD_PARTY: ThirdParty,
}


def user_from_dict(data: Dict[str, Any]) -> User:
    """Rebuild the concrete user variant from its stored form"""
    return USER_TYPES[UserType(data['user_type'])].from_dict(data)


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of an operation"""
    username: str
    roles: FrozenSet[RoleName]
    user_id: Optional[str] = None

    @classmethod
    def for_user(cls, user: User) -> 'Principal':
        return cls(username=user.username, roles=frozenset(user.roles), user_id=user.id)

    @classmethod
    def system(cls) -> 'Principal':
        """Principal used when authentication is disabled"""
        return cls(username="system", roles=frozenset({RoleName.ADMIN}))

    def has_role(self, role: RoleName) -> bool:
        return role in self.roles

    @property
    def is_admin(self) -> bool:
        return RoleName.ADMIN in self.roles


class UserRepository:
    """Persistence for every user variant"""

    def __init__(self, storage: StorageInterface, table_name: str = "users"):
        self.storage = storage
        self.table_name = table_name

    def save(self, user: User) -> User:
        self.storage.save(self.table_name, user.id, user.to_dict())
        return user

    def get(self, user_id: str) -> Optional[User]:
        data = self.storage.load(self.table_name, user_id)
        if data:
            return user_from_dict(data)
        return None

    def get_account_holder(self, holder_id: str) -> Optional[AccountHolder]:
        """Load a user only if it is an account holder"""
        user = self.get(holder_id)
        if isinstance(user, AccountHolder):
            return user
        return None

    def find_by_name(self, name: str, user_type: Optional[UserType] = None) -> Optional[User]:
        filters: Dict[str, Any] = {'name': name}
        if user_type:
            filters['user_type'] = user_type.value
        found = self.storage.find(self.table_name, filters)
        if found:
            return user_from_dict(found[0])
        return None

    def find_by_username(self, username: str) -> List[User]:
        return [user_from_dict(data) for data in self.storage.find(self.table_name, {'username': username})]

    def authenticate(self, username: str, password: str) -> Optional[User]:
        """Return the user whose username and password match, if any"""
        for user in self.find_by_username(username):
            if user.verify_password(password):
                return user
        return None

    def exists(self, user_id: str) -> bool:
        return self.storage.exists(self.table_name, user_id)

    def delete(self, user_id: str) -> bool:
        return self.storage.delete(self.table_name, user_id)
