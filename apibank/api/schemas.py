"""
Pydantic schemas for API requests and responses
"""

from decimal import Decimal
from datetime import date
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

from ..accounts import Account, AccountStatus, Checking, CreditCard, Savings
from ..currency import Money, Currency, DEFAULT_CURRENCY
from ..users import Address, User


class MoneyModel(BaseModel):
    amount: Decimal = Field(..., description="Decimal amount")
    currency: str = Field(DEFAULT_CURRENCY.code, description="Currency code (USD, EUR, etc.)")

    @field_validator('currency')
    @classmethod
    def _known_currency(cls, value: str) -> str:
        return Currency.from_code(value).code

    def to_money(self) -> Money:
        return Money(self.amount, Currency.from_code(self.currency))


class AddressModel(BaseModel):
    street: str = Field(..., min_length=1)
    postal_code: str
    city: str = Field(..., min_length=1)
    country: str = Field(..., min_length=1)

    def to_address(self) -> Address:
        return Address(
            street=self.street,
            postal_code=self.postal_code,
            city=self.city,
            country=self.country
        )


# Identity schemas
class TokenRequest(BaseModel):
    username: str
    password: str


class CreateAdminRequest(BaseModel):
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class CreateAccountHolderRequest(BaseModel):
    name: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    date_of_birth: date
    primary_address: AddressModel
    mail_address: Optional[AddressModel] = None

    @field_validator('date_of_birth')
    @classmethod
    def _not_in_future(cls, value: date) -> date:
        if value > date.today():
            raise ValueError("Date of birth cannot be in the future")
        return value


class CreateThirdPartyRequest(BaseModel):
    name: str = Field(..., min_length=1)
    hashed_key: str = Field(..., min_length=1)
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


# Account schemas
class UpdateStatusRequest(BaseModel):
    status: AccountStatus


def money_dict(money: Money) -> Dict[str, str]:
    return {"amount": str(money.amount), "currency": money.currency.code}


def user_to_response(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "user_type": user.user_type.value,
        "name": user.name,
        "username": user.username,
        "roles": user.role_names,
        "created_at": user.created_at.isoformat(),
    }


def account_to_response(account: Account) -> Dict[str, Any]:
    """Public view of an account; secret keys are never returned"""
    result = {
        "id": account.id,
        "account_type": account.account_type.value,
        "primary_owner_id": account.primary_owner_id,
        "secondary_owner_id": account.secondary_owner_id,
        "balance": money_dict(account.balance),
        "status": account.status.value,
        "created_at": account.created_at.isoformat(),
        "updated_at": account.updated_at.isoformat(),
    }

    if isinstance(account, (Checking, Savings)):
        result["minimum_balance"] = money_dict(account.minimum_balance)
    if isinstance(account, Checking):
        result["monthly_maintenance_fee"] = money_dict(account.monthly_maintenance_fee)
    if isinstance(account, (Savings, CreditCard)):
        result["interest_rate"] = str(account.interest_rate)
    if isinstance(account, CreditCard):
        result["credit_limit"] = money_dict(account.credit_limit)

    return result
