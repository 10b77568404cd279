"""
Cash Book Service - Bank Book / Cash Book with running balances
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, joinedload
from decimal import Decimal
from datetime import date

from tourdesk.models import (
    BankAccount, CashAccount, ReceiptDetail, PaymentDetail, ExpenseDetail,
    IncomeDetail, Transfer
)
from tourdesk.services.banking_service import BankingService
from tourdesk.services.calculations import apply_running_balance
from tourdesk.services.common import to_decimal, round2


def _for_query(query_record, fallback: str) -> str:
    if query_record is None:
        return ""
    return f" for {query_record.tour_package_query_name or fallback}"


def _account_name(bank: Optional[BankAccount], cash: Optional[CashAccount]) -> str:
    account = bank or cash
    return account.account_name if account else "account"


class CashBookService:
    """Chronological flows of one bank or cash account"""

    def __init__(self, db: Session):
        self.db = db

    def _in_range(self, query, column, start_date: date = None, end_date: date = None):
        if start_date:
            query = query.filter(column >= start_date)
        if end_date:
            query = query.filter(column <= end_date)
        return query

    def get_rows(self, bank_account_id: int = None, cash_account_id: int = None,
                 start_date: date = None, end_date: date = None) -> List[Dict]:
        """Payments, receipts, expenses, incomes and transfers as book rows"""
        if bank_account_id:
            fk = {'payment': PaymentDetail.bank_account_id, 'receipt': ReceiptDetail.bank_account_id,
                  'expense': ExpenseDetail.bank_account_id, 'income': IncomeDetail.bank_account_id}
            transfer_out, transfer_in = Transfer.from_bank_account_id, Transfer.to_bank_account_id
            account_id = bank_account_id
        else:
            fk = {'payment': PaymentDetail.cash_account_id, 'receipt': ReceiptDetail.cash_account_id,
                  'expense': ExpenseDetail.cash_account_id, 'income': IncomeDetail.cash_account_id}
            transfer_out, transfer_in = Transfer.from_cash_account_id, Transfer.to_cash_account_id
            account_id = cash_account_id

        rows = []

        payments = self._in_range(
            self.db.query(PaymentDetail).options(
                joinedload(PaymentDetail.supplier), joinedload(PaymentDetail.tour_package_query)
            ).filter(fk['payment'] == account_id),
            PaymentDetail.payment_date, start_date, end_date
        ).order_by(PaymentDetail.payment_date).all()
        for payment in payments:
            supplier = payment.supplier.name if payment.supplier else "supplier"
            rows.append({
                'id': payment.id,
                'date': payment.payment_date,
                'type': "Payment",
                'description': payment.note or (
                    f"Payment to {supplier}{_for_query(payment.tour_package_query, 'tour package')}"
                ),
                'reference': payment.transaction_id or payment.method,
                'inflow': Decimal("0"),
                'outflow': to_decimal(payment.amount),
            })

        receipts = self._in_range(
            self.db.query(ReceiptDetail).options(
                joinedload(ReceiptDetail.customer), joinedload(ReceiptDetail.tour_package_query)
            ).filter(fk['receipt'] == account_id),
            ReceiptDetail.receipt_date, start_date, end_date
        ).order_by(ReceiptDetail.receipt_date).all()
        for receipt in receipts:
            customer = receipt.customer.name if receipt.customer else "customer"
            rows.append({
                'id': receipt.id,
                'date': receipt.receipt_date,
                'type': "Receipt",
                'description': receipt.note or (
                    f"Receipt from {customer}{_for_query(receipt.tour_package_query, 'tour package')}"
                ),
                'reference': receipt.reference,
                'inflow': to_decimal(receipt.amount),
                'outflow': Decimal("0"),
            })

        expenses = self._in_range(
            self.db.query(ExpenseDetail).options(
                joinedload(ExpenseDetail.expense_category), joinedload(ExpenseDetail.tour_package_query)
            ).filter(fk['expense'] == account_id),
            ExpenseDetail.expense_date, start_date, end_date
        ).order_by(ExpenseDetail.expense_date).all()
        for expense in expenses:
            category = expense.expense_category.name if expense.expense_category else "Expense"
            rows.append({
                'id': expense.id,
                'date': expense.expense_date,
                'type': "Expense",
                'description': expense.description or (
                    f"{category}{_for_query(expense.tour_package_query, 'tour package')}"
                ),
                'reference': None,
                'inflow': Decimal("0"),
                'outflow': to_decimal(expense.amount),
            })

        incomes = self._in_range(
            self.db.query(IncomeDetail).options(
                joinedload(IncomeDetail.income_category), joinedload(IncomeDetail.tour_package_query)
            ).filter(fk['income'] == account_id),
            IncomeDetail.income_date, start_date, end_date
        ).order_by(IncomeDetail.income_date).all()
        for income in incomes:
            category = income.income_category.name if income.income_category else "Income"
            rows.append({
                'id': income.id,
                'date': income.income_date,
                'type': "Income",
                'description': income.description or (
                    f"{category}{_for_query(income.tour_package_query, 'tour package')}"
                ),
                'reference': None,
                'inflow': to_decimal(income.amount),
                'outflow': Decimal("0"),
            })

        transfers = self._in_range(
            self.db.query(Transfer).filter((transfer_out == account_id) | (transfer_in == account_id)),
            Transfer.transfer_date, start_date, end_date
        ).order_by(Transfer.transfer_date).all()
        for transfer in transfers:
            if getattr(transfer, transfer_out.key) == account_id:
                rows.append({
                    'id': transfer.id,
                    'date': transfer.transfer_date,
                    'type': "Transfer Out",
                    'description': transfer.description or (
                        f"Transfer to {_account_name(transfer.to_bank_account, transfer.to_cash_account)}"
                    ),
                    'reference': transfer.reference,
                    'inflow': Decimal("0"),
                    'outflow': to_decimal(transfer.amount),
                })
            if getattr(transfer, transfer_in.key) == account_id:
                rows.append({
                    'id': transfer.id,
                    'date': transfer.transfer_date,
                    'type': "Transfer In",
                    'description': transfer.description or (
                        f"Transfer from {_account_name(transfer.from_bank_account, transfer.from_cash_account)}"
                    ),
                    'reference': transfer.reference,
                    'inflow': to_decimal(transfer.amount),
                    'outflow': Decimal("0"),
                })

        return rows

    def _book(self, account, kind: str, start_date: date = None, end_date: date = None) -> Dict:
        banking = BankingService(self.db)
        ids = {'bank_account_id': account.id} if kind == "bank" else {'cash_account_id': account.id}

        opening_balance = to_decimal(account.opening_balance)
        if start_date:
            opening_balance += banking.net_flow(before=start_date, **ids)

        rows = self.get_rows(start_date=start_date, end_date=end_date, **ids)
        closing_balance = apply_running_balance(rows, opening_balance)
        total_in = sum((row['inflow'] for row in rows), Decimal("0"))
        total_out = sum((row['outflow'] for row in rows), Decimal("0"))

        return {
            'account_id': account.id,
            'account_name': account.account_name,
            'account_type': kind,
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'opening_balance': float(round2(opening_balance)),
            'total_inflow': float(round2(total_in)),
            'total_outflow': float(round2(total_out)),
            'closing_balance': float(round2(closing_balance)),
            'transactions': [
                {
                    'id': row['id'],
                    'date': row['date'].isoformat(),
                    'type': row['type'],
                    'description': row['description'],
                    'reference': row['reference'],
                    'inflow': float(row['inflow']),
                    'outflow': float(row['outflow']),
                    'balance': float(round2(row['balance'])),
                }
                for row in rows
            ],
        }

    def get_bank_book(self, account_id: int, start_date: date = None, end_date: date = None) -> Optional[Dict]:
        account = self.db.query(BankAccount).filter(BankAccount.id == account_id).first()
        if not account:
            return None
        return self._book(account, "bank", start_date, end_date)

    def get_cash_book(self, account_id: int, start_date: date = None, end_date: date = None) -> Optional[Dict]:
        account = self.db.query(CashAccount).filter(CashAccount.id == account_id).first()
        if not account:
            return None
        return self._book(account, "cash", start_date, end_date)

    def get_summary(self, start_date: date = None, end_date: date = None) -> List[Dict]:
        """Opening, flows and closing for every active bank and cash account"""
        summaries = []
        accounts = [("bank", a) for a in self.db.query(BankAccount).filter(BankAccount.is_active == True).all()]
        accounts += [("cash", a) for a in self.db.query(CashAccount).filter(CashAccount.is_active == True).all()]
        for kind, account in accounts:
            book = self._book(account, kind, start_date, end_date)
            book['entries_count'] = len(book.pop('transactions'))
            summaries.append(book)
        return summaries
