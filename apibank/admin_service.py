"""
Administrative Service Module

Validated creation of admins, account holders, third parties and accounts,
plus balance queries, balance overwrites, status changes and deletion.
Every mutating operation runs in one storage transaction and persists
immediately.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Optional, Tuple, Union

from .accounts import (
    Account, AccountRepository, AccountRules, AccountStatus,
    Checking, CreditCard, Savings, StudentChecking
)
from .config import APIBankConfig, get_config
from .currency import Currency, Money
from .dto import AccountDTO, CheckingDTO, CreditCardDTO, SavingsDTO
from .errors import ForbiddenError, NotFoundError, ValidationError
from .logging_config import get_logger, log_action
from .storage import StorageInterface
from .users import AccountHolder, Admin, Principal, RoleName, ThirdParty, UserRepository


def _utc_today() -> date:
    return datetime.now(timezone.utc).date()


class AdminService:
    """
    Orchestrates validation and persistence for the admin surface.

    Args:
        storage: Backing store for users and accounts
        config: Rules and defaults; the global configuration if omitted
        today: Returns the current date for the student age rule
    """

    def __init__(
        self,
        storage: StorageInterface,
        config: Optional[APIBankConfig] = None,
        today: Optional[Callable[[], date]] = None
    ):
        config = config or get_config()
        self.storage = storage
        self.users = UserRepository(storage)
        self.accounts = AccountRepository(storage)
        self.rules = AccountRules.from_config(config)
        self.default_currency = Currency.from_code(config.default_currency)
        self._today = today or _utc_today
        self.logger = get_logger("apibank.admin")

    # Users

    def add_admin(self, admin: Admin) -> Admin:
        """Store an admin with exactly the ADMIN role"""
        admin.roles = [RoleName.ADMIN]
        with self.storage.atomic():
            self.users.save(admin)
        log_action(self.logger, "info", "Admin created",
                   action="add_admin", resource=f"user:{admin.id}")
        return admin

    def add_account_holder(self, holder: AccountHolder) -> AccountHolder:
        """Store an account holder with the ACCOUNT_HOLDER role"""
        if holder.date_of_birth > self._today():
            raise ValidationError("Date of birth cannot be in the future")
        holder.roles = [RoleName.ACCOUNT_HOLDER]
        with self.storage.atomic():
            self.users.save(holder)
        log_action(self.logger, "info", "Account holder created",
                   action="add_account_holder", resource=f"user:{holder.id}")
        return holder

    def add_third_party(self, third_party: ThirdParty) -> ThirdParty:
        """Store a third-party client with the THIRD_PARTY role"""
        third_party.roles = [RoleName.THIRD_PARTY]
        with self.storage.atomic():
            self.users.save(third_party)
        log_action(self.logger, "info", "Third party created",
                   action="add_third_party", resource=f"user:{third_party.id}")
        return third_party

    # Accounts

    def add_checking(self, dto: CheckingDTO) -> Union[Checking, StudentChecking]:
        """
        Open a checking account. Primary owners younger than the student age
        threshold get a StudentChecking instead of a Checking.
        """
        with self.storage.atomic():
            primary, secondary_id = self._resolve_owners(dto)
            balance = self._opening_balance(dto)

            age = primary.age_on(self._today())
            if self.rules.is_student(age):
                account = StudentChecking.create(
                    primary_owner_id=primary.id,
                    secondary_owner_id=secondary_id,
                    secret_key=dto.secret_key,
                    balance=balance
                )
            else:
                account = Checking.create(
                    primary_owner_id=primary.id,
                    secondary_owner_id=secondary_id,
                    secret_key=dto.secret_key,
                    balance=balance,
                    minimum_balance=Money(self.rules.checking_minimum_balance, balance.currency),
                    monthly_maintenance_fee=Money(self.rules.checking_monthly_maintenance_fee, balance.currency)
                )
            self.accounts.save(account)

        self._log_account_created(account, extra={"primary_owner_age": age})
        return account

    def add_savings(self, dto: SavingsDTO) -> Savings:
        """Open a savings account"""
        minimum_balance, interest_rate = self.rules.savings_terms(dto.minimum_balance, dto.interest_rate)

        with self.storage.atomic():
            primary, secondary_id = self._resolve_owners(dto)
            balance = self._opening_balance(dto)
            account = Savings.create(
                primary_owner_id=primary.id,
                secondary_owner_id=secondary_id,
                secret_key=dto.secret_key,
                balance=balance,
                minimum_balance=Money(minimum_balance, balance.currency),
                interest_rate=interest_rate
            )
            self.accounts.save(account)

        self._log_account_created(account)
        return account

    def add_credit_card_account(self, dto: CreditCardDTO) -> CreditCard:
        """Open a credit card account"""
        credit_limit, interest_rate = self.rules.credit_card_terms(dto.credit_limit, dto.interest_rate)

        with self.storage.atomic():
            primary, secondary_id = self._resolve_owners(dto)
            balance = self._opening_balance(dto)
            account = CreditCard.create(
                primary_owner_id=primary.id,
                secondary_owner_id=secondary_id,
                balance=balance,
                credit_limit=Money(credit_limit, balance.currency),
                interest_rate=interest_rate,
                secret_key=dto.secret_key
            )
            self.accounts.save(account)

        self._log_account_created(account)
        return account

    def get_account(self, account_id: str) -> Account:
        account = self.accounts.get(account_id)
        if not account:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    def get_account_balance(self, account_id: str, principal: Principal) -> Money:
        """
        Read an account balance. Admins may read any account; account holders
        only the accounts they own.
        """
        account = self.get_account(account_id)

        if not principal.is_admin:
            if not principal.has_role(RoleName.ACCOUNT_HOLDER):
                raise ForbiddenError("Only admins and account holders can read balances")
            if not principal.user_id or not account.is_owned_by(principal.user_id):
                raise ForbiddenError(f"Account {account_id} does not belong to {principal.username}")

        return account.balance

    def update_account_balance(self, account_id: str, new_balance: Money) -> Account:
        """Overwrite the balance (amount and currency) of an existing account"""
        with self.storage.atomic():
            account = self.get_account(account_id)
            old_balance = account.balance
            account.balance = new_balance
            account.touch()
            self.accounts.save(account)

        log_action(self.logger, "info", "Account balance updated",
                   action="update_account_balance", resource=f"account:{account_id}",
                   extra={"old_balance": old_balance.to_string(), "new_balance": new_balance.to_string()})
        return account

    def update_account_status(self, account_id: str, status: AccountStatus) -> Account:
        with self.storage.atomic():
            account = self.get_account(account_id)
            account.status = status
            account.touch()
            self.accounts.save(account)

        log_action(self.logger, "info", "Account status updated",
                   action="update_account_status", resource=f"account:{account_id}",
                   extra={"status": status.value})
        return account

    def delete_account(self, account_id: str) -> None:
        """Permanently remove an account; missing ids are an error"""
        with self.storage.atomic():
            if not self.accounts.exists(account_id):
                raise NotFoundError(f"Account {account_id} not found")
            self.accounts.delete(account_id)

        log_action(self.logger, "info", "Account deleted",
                   action="delete_account", resource=f"account:{account_id}")

    # Helpers

    def _resolve_owners(self, dto: AccountDTO) -> Tuple[AccountHolder, Optional[str]]:
        primary = self.users.get_account_holder(dto.primary_owner_id)
        if not primary:
            raise NotFoundError(f"Primary owner {dto.primary_owner_id} not found")

        secondary_id = None
        if dto.secondary_owner_id:
            secondary = self.users.get_account_holder(dto.secondary_owner_id)
            if not secondary:
                raise NotFoundError(f"Secondary owner {dto.secondary_owner_id} not found")
            secondary_id = secondary.id

        return primary, secondary_id

    def _opening_balance(self, dto: AccountDTO) -> Money:
        currency = Currency.from_code(dto.currency) if dto.currency else self.default_currency
        return Money(dto.balance if dto.balance is not None else Decimal('0'), currency)

    def _log_account_created(self, account: Account, extra: Optional[dict] = None) -> None:
        details = {
            "account_type": account.account_type.value,
            "primary_owner_id": account.primary_owner_id,
            "currency": account.balance.currency.code,
        }
        details.update(extra or {})
        log_action(self.logger, "info", "Account created",
                   action="add_account", resource=f"account:{account.id}", extra=details)
