"""
Expense & Income Services
"""
from typing import Optional, List
from datetime import date
import logging

from tourdesk.models import ExpenseDetail, IncomeDetail, ExpenseCategory, IncomeCategory, Image
from tourdesk.schemas import ExpenseCreate, ExpenseUpdate, ExpensePayRequest
from tourdesk.services.common import ensure_exists
from tourdesk.services.receipt_service import PostedRecordService

logger = logging.getLogger(__name__)


class ExpenseService(PostedRecordService):
    model = ExpenseDetail
    date_column = 'expense_date'
    sign = -1
    label = "Expense"

    def get_all(self, tour_package_query_id: int = None, expense_category_id: int = None,
                start_date: date = None, end_date: date = None, accrued: Optional[bool] = None,
                bank_account_id: int = None, cash_account_id: int = None) -> List[ExpenseDetail]:
        query = self._base_query(tour_package_query_id, start_date, end_date, bank_account_id, cash_account_id)
        if expense_category_id:
            query = query.filter(ExpenseDetail.expense_category_id == expense_category_id)
        if accrued is not None:
            query = query.filter(ExpenseDetail.is_accrued == accrued)
        return query.all()

    def _is_posted(self, record) -> bool:
        return not record.is_accrued

    def _validate_references(self, values: dict):
        super()._validate_references(values)
        ensure_exists(self.db, ExpenseCategory, values.get('expense_category_id'), "Expense category")

    def create(self, data: ExpenseCreate) -> ExpenseDetail:
        if data.is_accrued:
            if data.bank_account_id or data.cash_account_id:
                raise ValueError("An accrued expense is not paid from an account yet")
            if data.accrued_date is None:
                data = data.model_copy(update={'accrued_date': data.expense_date})

        expense = super().create(data)
        for url in data.images:
            expense.images.append(Image(url=url))
        self.db.flush()
        return expense

    def update(self, record_id: int, data: ExpenseUpdate) -> Optional[ExpenseDetail]:
        expense = self.get_by_id(record_id)
        if not expense:
            return None
        if expense.is_accrued and (data.bank_account_id or data.cash_account_id):
            raise ValueError("Settle an accrued expense through the pay action")

        expense = super().update(record_id, data)
        if data.images is not None:
            expense.images = [Image(url=url) for url in data.images]
            self.db.flush()
        return expense

    def pay(self, expense_id: int, data: ExpensePayRequest) -> Optional[ExpenseDetail]:
        """Settle an accrued expense from a bank or cash account"""
        expense = self.get_by_id(expense_id)
        if not expense:
            return None
        if not expense.is_accrued:
            raise ValueError("Expense is not accrued")

        self.banking.resolve_account(data.bank_account_id, data.cash_account_id, self.label)
        expense.bank_account_id = data.bank_account_id
        expense.cash_account_id = data.cash_account_id
        expense.paid_date = data.paid_date
        expense.is_accrued = False
        self.db.flush()
        self._post(expense, 1)
        logger.info(f"Accrued expense {expense.id} paid on {data.paid_date}")
        return expense


class IncomeService(PostedRecordService):
    model = IncomeDetail
    date_column = 'income_date'
    sign = 1
    label = "Income"

    def get_all(self, tour_package_query_id: int = None, income_category_id: int = None,
                start_date: date = None, end_date: date = None,
                bank_account_id: int = None, cash_account_id: int = None) -> List[IncomeDetail]:
        query = self._base_query(tour_package_query_id, start_date, end_date, bank_account_id, cash_account_id)
        if income_category_id:
            query = query.filter(IncomeDetail.income_category_id == income_category_id)
        return query.all()

    def _validate_references(self, values: dict):
        super()._validate_references(values)
        ensure_exists(self.db, IncomeCategory, values.get('income_category_id'), "Income category")
