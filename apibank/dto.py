"""
Account opening requests

Plain data carriers passed to AdminService. They validate shape and sign;
business bounds are applied by the service.
"""

from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from .currency import Currency


class AccountDTO(BaseModel):
    primary_owner_id: str = Field(..., min_length=1, description="Id of the primary account holder")
    secondary_owner_id: Optional[str] = Field(None, description="Id of the optional secondary holder")
    balance: Optional[Decimal] = Field(None, ge=0, description="Opening balance, zero if omitted")
    currency: Optional[str] = Field(None, description="Currency code, default currency if omitted")

    @field_validator('currency')
    @classmethod
    def _known_currency(cls, value: Optional[str]) -> Optional[str]:
        if value is not None:
            Currency.from_code(value)
            return value.upper()
        return value


class CheckingDTO(AccountDTO):
    secret_key: str = Field(..., min_length=1)


class SavingsDTO(AccountDTO):
    secret_key: str = Field(..., min_length=1)
    minimum_balance: Optional[Decimal] = Field(None, ge=0)
    interest_rate: Optional[Decimal] = Field(None, ge=0)


class CreditCardDTO(AccountDTO):
    secret_key: Optional[str] = Field(None, description="Card password")
    credit_limit: Optional[Decimal] = Field(None, ge=0)
    interest_rate: Optional[Decimal] = Field(None, ge=0)
