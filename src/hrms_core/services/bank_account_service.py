"""Bank account service for employee salary accounts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from hrms_core.exceptions import ConflictError, NotFoundError, StateConflictError, ValidationError
from hrms_core.models import EmployeeBankAccount
from hrms_core.models.enums import BankAccountType
from hrms_core.repositories import EmployeeBankAccountRepository, EmployeeRepository
from hrms_core.services.common import enum_value, require

logger = logging.getLogger(__name__)

ACCOUNT_NUMBER_PATTERN = re.compile(r"^\d{9,18}$")
IFSC_PATTERN = re.compile(r"^[A-Z]{4}0[A-Z0-9]{6}$")


@dataclass
class BankAccountData:
    """Writable bank account fields."""

    bank_name: str
    account_number: str
    account_type: str = BankAccountType.SALARY.value
    ifsc_code: str | None = None
    branch_name: str | None = None
    is_primary: bool = False


class BankAccountService:
    """Service for employee bank accounts.

    An employee has at most one active primary account. Accounts are never
    hard-deleted; deletion deactivates them.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.accounts = EmployeeBankAccountRepository(session)
        self.employees = EmployeeRepository(session)

    async def add_bank_account(
        self, employee_id: UUID, data: BankAccountData
    ) -> EmployeeBankAccount:
        await self._require_employee(employee_id)
        self._validate(data)

        if await self.accounts.find_by_employee_and_account_number(
            employee_id, data.account_number
        ):
            raise ConflictError("Account number already exists for this employee")

        # First active account becomes primary
        make_primary = data.is_primary or await self.accounts.count_active_by_employee(
            employee_id
        ) == 0
        if make_primary:
            await self.accounts.clear_primary_for_employee(employee_id)

        account = EmployeeBankAccount(
            employee_id=employee_id,
            bank_name=data.bank_name,
            account_number=data.account_number,
            account_type=data.account_type,
            ifsc_code=data.ifsc_code,
            branch_name=data.branch_name,
            is_primary=make_primary,
            is_active=True,
        )
        await self.accounts.add(account)
        logger.info(
            "Added bank account %s for employee %s", account.masked_account_number, employee_id
        )
        return account

    async def update_bank_account(
        self, bank_account_id: UUID, data: BankAccountData
    ) -> EmployeeBankAccount:
        account = await self.get_bank_account(bank_account_id)
        self._validate(data)

        if data.account_number != account.account_number:
            existing = await self.accounts.find_by_employee_and_account_number(
                account.employee_id, data.account_number
            )
            if existing is not None and existing.bank_account_id != bank_account_id:
                raise ConflictError("Account number already exists for this employee")

        account.bank_name = data.bank_name
        account.account_number = data.account_number
        account.account_type = data.account_type
        account.ifsc_code = data.ifsc_code
        account.branch_name = data.branch_name
        await self.session.flush()

        if data.is_primary and not account.is_primary:
            return await self.set_primary_account(account.employee_id, bank_account_id)
        return account

    async def get_bank_account(self, bank_account_id: UUID) -> EmployeeBankAccount:
        account = await self.accounts.get(bank_account_id)
        if account is None:
            raise NotFoundError("Bank account", bank_account_id)
        return account

    async def get_bank_accounts(self, employee_id: UUID) -> list[EmployeeBankAccount]:
        await self._require_employee(employee_id)
        return await self.accounts.find_active_by_employee(employee_id)

    async def get_bank_accounts_by_type(
        self, employee_id: UUID, account_type: str
    ) -> list[EmployeeBankAccount]:
        kind = enum_value(BankAccountType, account_type, "account type")
        return await self.accounts.find_by_type(employee_id, kind)

    async def get_primary_account(self, employee_id: UUID) -> EmployeeBankAccount:
        await self._require_employee(employee_id)
        account = await self.accounts.find_primary(employee_id)
        if account is None:
            raise NotFoundError("Bank account", message="Primary bank account not found")
        return account

    async def set_primary_account(
        self, employee_id: UUID, bank_account_id: UUID
    ) -> EmployeeBankAccount:
        account = await self.get_bank_account(bank_account_id)
        if account.employee_id != employee_id:
            raise ValidationError("Bank account does not belong to the specified employee")
        if not account.is_active:
            raise StateConflictError("Cannot set inactive bank account as primary")

        await self.accounts.clear_primary_for_employee(employee_id)
        account.is_primary = True
        await self.session.flush()
        return account

    async def delete_bank_account(self, bank_account_id: UUID) -> EmployeeBankAccount:
        account = await self.get_bank_account(bank_account_id)
        account.is_active = False
        account.is_primary = False
        await self.session.flush()
        return account

    async def reactivate_bank_account(self, bank_account_id: UUID) -> EmployeeBankAccount:
        account = await self.get_bank_account(bank_account_id)
        account.is_active = True
        await self.session.flush()
        return account

    async def deactivate_all_accounts_for_employee(self, employee_id: UUID) -> int:
        await self._require_employee(employee_id)
        return await self.accounts.deactivate_all_for_employee(employee_id)

    async def get_masked_account_number(self, bank_account_id: UUID) -> str:
        account = await self.get_bank_account(bank_account_id)
        return account.masked_account_number

    async def _require_employee(self, employee_id: UUID) -> None:
        if await self.employees.get(employee_id) is None:
            raise NotFoundError("Employee", employee_id)

    def _validate(self, data: BankAccountData) -> None:
        require(data.bank_name, "Bank name is required")
        require(data.account_number, "Account number is required")
        if not ACCOUNT_NUMBER_PATTERN.match(data.account_number):
            raise ValidationError("Invalid account number format. Must be 9-18 digits")
        if data.ifsc_code:
            data.ifsc_code = data.ifsc_code.upper()
            if not IFSC_PATTERN.match(data.ifsc_code):
                raise ValidationError("Invalid IFSC code format")
        data.account_type = enum_value(BankAccountType, data.account_type, "account type")
