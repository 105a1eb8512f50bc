"""
Account Module

The closed set of account variants (checking, student checking, savings,
credit card) and their storage. All variants share one ``accounts`` table,
tagged by ``account_type``, so any account can be loaded by id alone.
"""

from decimal import Decimal
from datetime import datetime
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Type
from enum import Enum

from .config import APIBankConfig
from .currency import Money
from .errors import ValidationError
from .storage import StorageInterface, StorageRecord, new_id, utcnow


class AccountStatus(Enum):
    """Account lifecycle states"""
    ACTIVE = "ACTIVE"
    FROZEN = "FROZEN"

    def __str__(self) -> str:
        return self.value


class AccountType(Enum):
    CHECKING = "checking"
    STUDENT_CHECKING = "student_checking"
    SAVINGS = "savings"
    CREDIT_CARD = "credit_card"


@dataclass
class Account(StorageRecord):
    """
    Fields common to every account. Owners are referenced by id; an account
    never owns its holders.
    """
    primary_owner_id: str
    secondary_owner_id: Optional[str]
    balance: Money
    status: AccountStatus

    account_type: ClassVar[AccountType]

    def __post_init__(self):
        if not self.primary_owner_id:
            raise ValidationError("Primary owner is required")
        if self.secondary_owner_id == self.primary_owner_id:
            raise ValidationError("Secondary owner must differ from primary owner")

    @staticmethod
    def _new_fields(primary_owner_id: str, secondary_owner_id: Optional[str],
                    balance: Money) -> Dict[str, Any]:
        now = utcnow()
        return {
            'id': new_id(),
            'created_at': now,
            'updated_at': now,
            'primary_owner_id': primary_owner_id,
            'secondary_owner_id': secondary_owner_id,
            'balance': balance,
            'status': AccountStatus.ACTIVE,
        }

    def is_owned_by(self, holder_id: str) -> bool:
        return holder_id in (self.primary_owner_id, self.secondary_owner_id)

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result['account_type'] = self.account_type.value
        return result

    @classmethod
    def _common_from_dict(cls, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            'id': data['id'],
            'created_at': datetime.fromisoformat(data['created_at']),
            'updated_at': datetime.fromisoformat(data['updated_at']),
            'primary_owner_id': data['primary_owner_id'],
            'secondary_owner_id': data.get('secondary_owner_id'),
            'balance': Money.from_dict(data['balance']),
            'status': AccountStatus(data['status']),
        }


@dataclass
class Checking(Account):
    """Standard checking account with minimum balance and monthly fee"""
    secret_key: str
    minimum_balance: Money
    monthly_maintenance_fee: Money

    account_type: ClassVar[AccountType] = AccountType.CHECKING

    def __post_init__(self):
        super().__post_init__()
        if self.minimum_balance.is_negative():
            raise ValidationError("Minimum balance cannot be negative")
        if self.monthly_maintenance_fee.is_negative():
            raise ValidationError("Monthly maintenance fee cannot be negative")

    @classmethod
    def create(cls, primary_owner_id: str, secondary_owner_id: Optional[str], secret_key: str,
               balance: Money, minimum_balance: Money, monthly_maintenance_fee: Money) -> 'Checking':
        return cls(
            secret_key=secret_key,
            minimum_balance=minimum_balance,
            monthly_maintenance_fee=monthly_maintenance_fee,
            **cls._new_fields(primary_owner_id, secondary_owner_id, balance)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Checking':
        return cls(
            secret_key=data['secret_key'],
            minimum_balance=Money.from_dict(data['minimum_balance']),
            monthly_maintenance_fee=Money.from_dict(data['monthly_maintenance_fee']),
            **cls._common_from_dict(data)
        )


@dataclass
class StudentChecking(Account):
    """Checking account for young holders: no minimum balance, no fees"""
    secret_key: str

    account_type: ClassVar[AccountType] = AccountType.STUDENT_CHECKING

    @classmethod
    def create(cls, primary_owner_id: str, secondary_owner_id: Optional[str], secret_key: str,
               balance: Money) -> 'StudentChecking':
        return cls(secret_key=secret_key, **cls._new_fields(primary_owner_id, secondary_owner_id, balance))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'StudentChecking':
        return cls(secret_key=data['secret_key'], **cls._common_from_dict(data))


@dataclass
class Savings(Account):
    """Interest-bearing savings account"""
    secret_key: str
    minimum_balance: Money
    interest_rate: Decimal

    account_type: ClassVar[AccountType] = AccountType.SAVINGS

    def __post_init__(self):
        super().__post_init__()
        if self.minimum_balance.is_negative():
            raise ValidationError("Minimum balance cannot be negative")
        if self.interest_rate < Decimal('0'):
            raise ValidationError("Interest rate cannot be negative")

    @classmethod
    def create(cls, primary_owner_id: str, secondary_owner_id: Optional[str], secret_key: str,
               balance: Money, minimum_balance: Money, interest_rate: Decimal) -> 'Savings':
        return cls(
            secret_key=secret_key,
            minimum_balance=minimum_balance,
            interest_rate=interest_rate,
            **cls._new_fields(primary_owner_id, secondary_owner_id, balance)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Savings':
        return cls(
            secret_key=data['secret_key'],
            minimum_balance=Money.from_dict(data['minimum_balance']),
            interest_rate=Decimal(data['interest_rate']),
            **cls._common_from_dict(data)
        )


@dataclass
class CreditCard(Account):
    """Revolving credit account"""
    credit_limit: Money
    interest_rate: Decimal
    secret_key: Optional[str] = None

    account_type: ClassVar[AccountType] = AccountType.CREDIT_CARD

    def __post_init__(self):
        super().__post_init__()
        if self.credit_limit.is_negative():
            raise ValidationError("Credit limit cannot be negative")
        if self.interest_rate < Decimal('0'):
            raise ValidationError("Interest rate cannot be negative")

    @classmethod
    def create(cls, primary_owner_id: str, secondary_owner_id: Optional[str],
               balance: Money, credit_limit: Money, interest_rate: Decimal,
               secret_key: Optional[str] = None) -> 'CreditCard':
        return cls(
            credit_limit=credit_limit,
            interest_rate=interest_rate,
            secret_key=secret_key,
            **cls._new_fields(primary_owner_id, secondary_owner_id, balance)
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CreditCard':
        return cls(
            credit_limit=Money.from_dict(data['credit_limit']),
            interest_rate=Decimal(data['interest_rate']),
            secret_key=data.get('secret_key'),
            **cls._common_from_dict(data)
        )


ACCOUNT_TYPES: Dict[AccountType, Type[Account]] = {
    AccountType.CHECKING: Checking,
    AccountType.STUDENT_CHECKING: StudentChecking,
    AccountType.SAVINGS: Savings,
    AccountType.CREDIT_CARD: CreditCard,
}


def account_from_dict(data: Dict[str, Any]) -> Account:
    """Rebuild the concrete account variant from its stored form"""
    return ACCOUNT_TYPES[AccountType(data['account_type'])].from_dict(data)


@dataclass
class AccountRules:
    """Defaults and bounds applied when opening accounts"""
    student_age_threshold: int = 24
    checking_minimum_balance: Decimal = Decimal('250')
    checking_monthly_maintenance_fee: Decimal = Decimal('12')
    savings_default_minimum_balance: Decimal = Decimal('1000')
    savings_min_minimum_balance: Decimal = Decimal('100')
    savings_default_interest_rate: Decimal = Decimal('0.0025')
    savings_max_interest_rate: Decimal = Decimal('0.5')
    credit_card_default_limit: Decimal = Decimal('100')
    credit_card_max_limit: Decimal = Decimal('100000')
    credit_card_default_interest_rate: Decimal = Decimal('0.2')
    credit_card_min_interest_rate: Decimal = Decimal('0.1')

    @classmethod
    def from_config(cls, config: APIBankConfig) -> 'AccountRules':
        return cls(
            student_age_threshold=config.student_age_threshold,
            checking_minimum_balance=Decimal(config.checking_minimum_balance),
            checking_monthly_maintenance_fee=Decimal(config.checking_monthly_maintenance_fee),
            savings_default_minimum_balance=Decimal(config.savings_default_minimum_balance),
            savings_min_minimum_balance=Decimal(config.savings_min_minimum_balance),
            savings_default_interest_rate=Decimal(config.savings_default_interest_rate),
            savings_max_interest_rate=Decimal(config.savings_max_interest_rate),
            credit_card_default_limit=Decimal(config.credit_card_default_limit),
            credit_card_max_limit=Decimal(config.credit_card_max_limit),
            credit_card_default_interest_rate=Decimal(config.credit_card_default_interest_rate),
            credit_card_min_interest_rate=Decimal(config.credit_card_min_interest_rate),
        )

    def is_student(self, age: int) -> bool:
        return age < self.student_age_threshold

    def savings_terms(self, minimum_balance: Optional[Decimal],
                      interest_rate: Optional[Decimal]) -> tuple:
        """Resolve savings minimum balance and interest rate, enforcing bounds"""
        if minimum_balance is None:
            minimum_balance = self.savings_default_minimum_balance
        if interest_rate is None:
            interest_rate = self.savings_default_interest_rate

        if minimum_balance < self.savings_min_minimum_balance:
            raise ValidationError(
                f"Savings minimum balance cannot be lower than {self.savings_min_minimum_balance}"
            )
        if interest_rate > self.savings_max_interest_rate:
            raise ValidationError(
                f"Savings interest rate cannot be higher than {self.savings_max_interest_rate}"
            )
        return minimum_balance, interest_rate

    def credit_card_terms(self, credit_limit: Optional[Decimal],
                          interest_rate: Optional[Decimal]) -> tuple:
        """Resolve credit limit and interest rate, enforcing bounds"""
        if credit_limit is None:
            credit_limit = self.credit_card_default_limit
        if interest_rate is None:
            interest_rate = self.credit_card_default_interest_rate

        if credit_limit > self.credit_card_max_limit:
            raise ValidationError(f"Credit limit cannot be higher than {self.credit_card_max_limit}")
        if interest_rate < self.credit_card_min_interest_rate:
            raise ValidationError(
                f"Credit card interest rate cannot be lower than {self.credit_card_min_interest_rate}"
            )
        return credit_limit, interest_rate


class AccountRepository:
    """Polymorphic persistence for every account variant"""

    def __init__(self, storage: StorageInterface, table_name: str = "accounts"):
        self.storage = storage
        self.table_name = table_name

    def save(self, account: Account) -> Account:
        self.storage.save(self.table_name, account.id, account.to_dict())
        return account

    def get(self, account_id: str) -> Optional[Account]:
        data = self.storage.load(self.table_name, account_id)
        if data:
            return account_from_dict(data)
        return None

    def exists(self, account_id: str) -> bool:
        return self.storage.exists(self.table_name, account_id)

    def delete(self, account_id: str) -> bool:
        return self.storage.delete(self.table_name, account_id)

    def count(self) -> int:
        return self.storage.count(self.table_name)
