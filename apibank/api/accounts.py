"""
Account endpoints available to any authenticated principal
"""

from fastapi import APIRouter, Depends

from .auth import BankingSystem, get_banking_system, get_current_principal
from .schemas import money_dict
from ..users import Principal


router = APIRouter()


@router.get("/{account_id}/balance")
async def get_account_balance(
    account_id: str,
    principal: Principal = Depends(get_current_principal),
    system: BankingSystem = Depends(get_banking_system)
):
    """Get the balance of an account the caller may read"""
    balance = system.admin_service.get_account_balance(account_id, principal)
    return {"account_id": account_id, "balance": money_dict(balance)}
