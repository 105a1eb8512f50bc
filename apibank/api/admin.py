"""
Admin endpoints: identities, account opening and account maintenance
"""

from fastapi import APIRouter, Depends, Response, status

from .auth import BankingSystem, get_banking_system, require_admin
from .schemas import (
    CreateAdminRequest, CreateAccountHolderRequest, CreateThirdPartyRequest,
    MoneyModel, UpdateStatusRequest, account_to_response, user_to_response
)
from ..dto import CheckingDTO, CreditCardDTO, SavingsDTO
from ..users import AccountHolder, Admin, ThirdParty


router = APIRouter(dependencies=[Depends(require_admin)])


@router.post("/admins", status_code=status.HTTP_201_CREATED)
async def create_admin(request: CreateAdminRequest, system: BankingSystem = Depends(get_banking_system)):
    admin = Admin.create(name=request.name, username=request.username, password=request.password)
    return user_to_response(system.admin_service.add_admin(admin))


@router.post("/account-holders", status_code=status.HTTP_201_CREATED)
async def create_account_holder(
    request: CreateAccountHolderRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    holder = AccountHolder.create(
        name=request.name,
        username=request.username,
        password=request.password,
        date_of_birth=request.date_of_birth,
        primary_address=request.primary_address.to_address(),
        mail_address=request.mail_address.to_address() if request.mail_address else None
    )
    stored = system.admin_service.add_account_holder(holder)
    response = user_to_response(stored)
    response["date_of_birth"] = stored.date_of_birth.isoformat()
    return response


@router.post("/third-parties", status_code=status.HTTP_201_CREATED)
async def create_third_party(
    request: CreateThirdPartyRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    third_party = ThirdParty.create(
        name=request.name,
        hashed_key=request.hashed_key,
        password=request.password,
        username=request.username
    )
    stored = system.admin_service.add_third_party(third_party)
    response = user_to_response(stored)
    response["hashed_key"] = stored.hashed_key
    return response


@router.post("/accounts/checking", status_code=status.HTTP_201_CREATED)
async def create_checking(dto: CheckingDTO, system: BankingSystem = Depends(get_banking_system)):
    """Open a checking account (student checking for young primary owners)"""
    return account_to_response(system.admin_service.add_checking(dto))


@router.post("/accounts/savings", status_code=status.HTTP_201_CREATED)
async def create_savings(dto: SavingsDTO, system: BankingSystem = Depends(get_banking_system)):
    return account_to_response(system.admin_service.add_savings(dto))


@router.post("/accounts/credit-card", status_code=status.HTTP_201_CREATED)
async def create_credit_card(dto: CreditCardDTO, system: BankingSystem = Depends(get_banking_system)):
    return account_to_response(system.admin_service.add_credit_card_account(dto))


@router.get("/accounts/{account_id}")
async def get_account(account_id: str, system: BankingSystem = Depends(get_banking_system)):
    return account_to_response(system.admin_service.get_account(account_id))


@router.patch("/accounts/{account_id}/balance")
async def update_balance(
    account_id: str,
    request: MoneyModel,
    system: BankingSystem = Depends(get_banking_system)
):
    """Overwrite an account balance"""
    account = system.admin_service.update_account_balance(account_id, request.to_money())
    return account_to_response(account)


@router.patch("/accounts/{account_id}/status")
async def update_status(
    account_id: str,
    request: UpdateStatusRequest,
    system: BankingSystem = Depends(get_banking_system)
):
    account = system.admin_service.update_account_status(account_id, request.status)
    return account_to_response(account)


@router.delete("/accounts/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(account_id: str, system: BankingSystem = Depends(get_banking_system)):
    system.admin_service.delete_account(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
