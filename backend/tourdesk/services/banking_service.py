"""
Banking Service - Bank/Cash Accounts, Balance Postings, Transfers
"""
from typing import Optional, List, Tuple, Union
from sqlalchemy.orm import Session
from sqlalchemy import func
from decimal import Decimal
from datetime import date
import logging

from tourdesk.models import (
    BankAccount, CashAccount, Transfer, ReceiptDetail, PaymentDetail,
    ExpenseDetail, IncomeDetail
)
from tourdesk.schemas import (
    BankAccountCreate, BankAccountUpdate, CashAccountCreate, CashAccountUpdate,
    TransferCreate, TransferUpdate
)
from tourdesk.services.common import to_decimal

logger = logging.getLogger(__name__)

Account = Union[BankAccount, CashAccount]

# (model, date column, bank fk, cash fk, sign)
FLOW_SOURCES = (
    (ReceiptDetail, ReceiptDetail.receipt_date, ReceiptDetail.bank_account_id, ReceiptDetail.cash_account_id, 1),
    (IncomeDetail, IncomeDetail.income_date, IncomeDetail.bank_account_id, IncomeDetail.cash_account_id, 1),
    (PaymentDetail, PaymentDetail.payment_date, PaymentDetail.bank_account_id, PaymentDetail.cash_account_id, -1),
    (ExpenseDetail, ExpenseDetail.expense_date, ExpenseDetail.bank_account_id, ExpenseDetail.cash_account_id, -1),
)


def check_single_account(bank_account_id: Optional[int], cash_account_id: Optional[int], label: str = "Transaction"):
    """A posting goes to exactly one of a bank account or a cash account"""
    if bank_account_id and cash_account_id:
        raise ValueError(f"{label} cannot use both a bank account and a cash account")
    if not bank_account_id and not cash_account_id:
        raise ValueError(f"{label} requires a bank account or a cash account")


class BankingService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== BANK ACCOUNTS ====================

    def get_bank_account(self, account_id: int) -> Optional[BankAccount]:
        return self.db.query(BankAccount).filter(BankAccount.id == account_id).first()

    def get_bank_accounts(self, include_inactive: bool = False) -> List[BankAccount]:
        query = self.db.query(BankAccount)
        if not include_inactive:
            query = query.filter(BankAccount.is_active == True)
        return query.order_by(BankAccount.account_name).all()

    def create_bank_account(self, data: BankAccountCreate) -> BankAccount:
        opening_balance = data.opening_balance or Decimal("0")
        account = BankAccount(
            account_name=data.account_name,
            bank_name=data.bank_name,
            account_number=data.account_number,
            ifsc_code=data.ifsc_code,
            branch=data.branch,
            opening_balance=opening_balance,
            current_balance=opening_balance,
            is_active=data.is_active
        )
        self.db.add(account)
        self.db.flush()
        return account

    def update_bank_account(self, account_id: int, data: BankAccountUpdate) -> Optional[BankAccount]:
        account = self.get_bank_account(account_id)
        if not account:
            return None
        self._apply_account_update(account, data.model_dump(exclude_unset=True))
        return account

    def delete_bank_account(self, account_id: int) -> bool:
        account = self.get_bank_account(account_id)
        if not account:
            return False
        if self._has_transactions(bank_account_id=account.id):
            raise ValueError("Bank account has transactions and cannot be deleted")
        self.db.delete(account)
        self.db.flush()
        return True

    # ==================== CASH ACCOUNTS ====================

    def get_cash_account(self, account_id: int) -> Optional[CashAccount]:
        return self.db.query(CashAccount).filter(CashAccount.id == account_id).first()

    def get_cash_accounts(self, include_inactive: bool = False) -> List[CashAccount]:
        query = self.db.query(CashAccount)
        if not include_inactive:
            query = query.filter(CashAccount.is_active == True)
        return query.order_by(CashAccount.account_name).all()

    def create_cash_account(self, data: CashAccountCreate) -> CashAccount:
        opening_balance = data.opening_balance or Decimal("0")
        account = CashAccount(
            account_name=data.account_name,
            opening_balance=opening_balance,
            current_balance=opening_balance,
            is_active=data.is_active
        )
        self.db.add(account)
        self.db.flush()
        return account

    def update_cash_account(self, account_id: int, data: CashAccountUpdate) -> Optional[CashAccount]:
        account = self.get_cash_account(account_id)
        if not account:
            return None
        self._apply_account_update(account, data.model_dump(exclude_unset=True))
        return account

    def delete_cash_account(self, account_id: int) -> bool:
        account = self.get_cash_account(account_id)
        if not account:
            return False
        if self._has_transactions(cash_account_id=account.id):
            raise ValueError("Cash account has transactions and cannot be deleted")
        self.db.delete(account)
        self.db.flush()
        return True

    def _apply_account_update(self, account: Account, update_data: dict):
        # A changed opening balance shifts the current balance by the same amount
        if update_data.get('opening_balance') is not None:
            difference = to_decimal(update_data['opening_balance']) - to_decimal(account.opening_balance)
            account.current_balance = to_decimal(account.current_balance) + difference
        for key, value in update_data.items():
            if value is not None or key not in ('account_name', 'opening_balance'):
                setattr(account, key, value)
        self.db.flush()

    def _has_transactions(self, bank_account_id: int = None, cash_account_id: int = None) -> bool:
        for model, _, bank_col, cash_col, _ in FLOW_SOURCES:
            column = bank_col if bank_account_id else cash_col
            account_id = bank_account_id or cash_account_id
            if self.db.query(model.id).filter(column == account_id).first():
                return True
        if bank_account_id:
            clause = (Transfer.from_bank_account_id == bank_account_id) | (Transfer.to_bank_account_id == bank_account_id)
        else:
            clause = (Transfer.from_cash_account_id == cash_account_id) | (Transfer.to_cash_account_id == cash_account_id)
        return self.db.query(Transfer.id).filter(clause).first() is not None

    # ==================== POSTINGS ====================

    def resolve_account(self, bank_account_id: Optional[int], cash_account_id: Optional[int],
                        label: str = "Transaction") -> Tuple[str, Account]:
        """Validate the account choice of a posting and load the account"""
        check_single_account(bank_account_id, cash_account_id, label)
        if bank_account_id:
            account = self.get_bank_account(bank_account_id)
            if not account:
                raise ValueError(f"Bank account {bank_account_id} not found")
            return "bank", account
        account = self.get_cash_account(cash_account_id)
        if not account:
            raise ValueError(f"Cash account {cash_account_id} not found")
        return "cash", account

    def post(self, bank_account_id: Optional[int], cash_account_id: Optional[int], change) -> Optional[Account]:
        """
        Add `change` to the current balance of the bank or cash account.
        Inflows pass a positive change, outflows a negative one.
        """
        if not bank_account_id and not cash_account_id:
            return None
        kind, account = self.resolve_account(bank_account_id, cash_account_id)
        change = to_decimal(change)
        previous = to_decimal(account.current_balance)
        account.current_balance = previous + change
        self.db.flush()
        logger.info(
            f"Balance posted account={kind}:{account.id} previous={previous} "
            f"change={change} new={account.current_balance}"
        )
        return account

    # ==================== TRANSFERS ====================

    def get_transfer(self, transfer_id: int) -> Optional[Transfer]:
        return self.db.query(Transfer).filter(Transfer.id == transfer_id).first()

    def get_transfers(self, start_date: date = None, end_date: date = None) -> List[Transfer]:
        query = self.db.query(Transfer)
        if start_date:
            query = query.filter(Transfer.transfer_date >= start_date)
        if end_date:
            query = query.filter(Transfer.transfer_date <= end_date)
        return query.order_by(Transfer.transfer_date.desc(), Transfer.id.desc()).all()

    def _validate_transfer(self, from_bank: Optional[int], from_cash: Optional[int],
                           to_bank: Optional[int], to_cash: Optional[int]):
        self.resolve_account(from_bank, from_cash, "Transfer source")
        self.resolve_account(to_bank, to_cash, "Transfer destination")
        if (from_bank and from_bank == to_bank) or (from_cash and from_cash == to_cash):
            raise ValueError("Source and destination accounts must be different")

    def _post_transfer(self, transfer: Transfer, sign: int):
        amount = to_decimal(transfer.amount) * sign
        self.post(transfer.from_bank_account_id, transfer.from_cash_account_id, -amount)
        self.post(transfer.to_bank_account_id, transfer.to_cash_account_id, amount)

    def create_transfer(self, data: TransferCreate) -> Transfer:
        self._validate_transfer(
            data.from_bank_account_id, data.from_cash_account_id,
            data.to_bank_account_id, data.to_cash_account_id
        )
        transfer = Transfer(**data.model_dump())
        self.db.add(transfer)
        self.db.flush()
        self._post_transfer(transfer, 1)
        return transfer

    def update_transfer(self, transfer_id: int, data: TransferUpdate) -> Optional[Transfer]:
        transfer = self.get_transfer(transfer_id)
        if not transfer:
            return None

        update_data = data.model_dump(exclude_unset=True)
        merged = {
            key: update_data.get(key, getattr(transfer, key))
            for key in ('from_bank_account_id', 'from_cash_account_id', 'to_bank_account_id', 'to_cash_account_id')
        }
        self._validate_transfer(
            merged['from_bank_account_id'], merged['from_cash_account_id'],
            merged['to_bank_account_id'], merged['to_cash_account_id']
        )

        self._post_transfer(transfer, -1)
        for key, value in update_data.items():
            if value is not None or key in merged:
                setattr(transfer, key, value)
        self.db.flush()
        self._post_transfer(transfer, 1)
        return transfer

    def delete_transfer(self, transfer_id: int) -> bool:
        transfer = self.get_transfer(transfer_id)
        if not transfer:
            return False
        self._post_transfer(transfer, -1)
        self.db.delete(transfer)
        self.db.flush()
        return True

    # ==================== BALANCES ====================

    def net_flow(self, bank_account_id: int = None, cash_account_id: int = None,
                 before: date = None) -> Decimal:
        """Inflows minus outflows of an account, optionally only those dated before a day"""
        account_id = bank_account_id or cash_account_id
        total = Decimal("0")

        for model, date_col, bank_col, cash_col, sign in FLOW_SOURCES:
            column = bank_col if bank_account_id else cash_col
            query = self.db.query(func.coalesce(func.sum(model.amount), 0)).filter(column == account_id)
            if before:
                query = query.filter(date_col < before)
            total += to_decimal(query.scalar()) * sign

        if bank_account_id:
            from_col, to_col = Transfer.from_bank_account_id, Transfer.to_bank_account_id
        else:
            from_col, to_col = Transfer.from_cash_account_id, Transfer.to_cash_account_id
        for column, sign in ((to_col, 1), (from_col, -1)):
            query = self.db.query(func.coalesce(func.sum(Transfer.amount), 0)).filter(column == account_id)
            if before:
                query = query.filter(Transfer.transfer_date < before)
            total += to_decimal(query.scalar()) * sign

        return total

    def recalculate_bank_balance(self, account_id: int) -> Optional[dict]:
        account = self.get_bank_account(account_id)
        if not account:
            return None
        return self._recalculate(account, self.net_flow(bank_account_id=account.id))

    def recalculate_cash_balance(self, account_id: int) -> Optional[dict]:
        account = self.get_cash_account(account_id)
        if not account:
            return None
        return self._recalculate(account, self.net_flow(cash_account_id=account.id))

    def _recalculate(self, account: Account, flow: Decimal) -> dict:
        previous = to_decimal(account.current_balance)
        account.current_balance = to_decimal(account.opening_balance) + flow
        self.db.flush()
        logger.info(
            f"Balance recalculated account={account.id} previous={previous} new={account.current_balance}"
        )
        return {
            'id': account.id,
            'account_name': account.account_name,
            'opening_balance': float(account.opening_balance or 0),
            'previous_balance': float(previous),
            'current_balance': float(account.current_balance),
            'difference': float(to_decimal(account.current_balance) - previous)
        }
