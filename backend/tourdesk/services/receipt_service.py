"""
Receipt & Payment Services - money in from customers, money out to suppliers
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from datetime import date

from tourdesk.models import (
    ReceiptDetail, PaymentDetail, Customer, Supplier, TourPackageQuery, TdsStatus
)
from tourdesk.services.banking_service import BankingService
from tourdesk.services.common import ensure_exists, to_decimal


class PostedRecordService:
    """
    Base for records that move money on a bank or cash account.
    `sign` is +1 for inflows and -1 for outflows.
    """
    model = None
    date_column = None
    sign = 1
    label = "Record"

    def __init__(self, db: Session):
        self.db = db
        self.banking = BankingService(db)

    def get_by_id(self, record_id: int):
        return self.db.query(self.model).filter(self.model.id == record_id).first()

    def _base_query(self, tour_package_query_id: int = None, start_date: date = None,
                    end_date: date = None, bank_account_id: int = None, cash_account_id: int = None):
        query = self.db.query(self.model)
        date_column = getattr(self.model, self.date_column)
        if tour_package_query_id:
            query = query.filter(self.model.tour_package_query_id == tour_package_query_id)
        if start_date:
            query = query.filter(date_column >= start_date)
        if end_date:
            query = query.filter(date_column <= end_date)
        if bank_account_id:
            query = query.filter(self.model.bank_account_id == bank_account_id)
        if cash_account_id:
            query = query.filter(self.model.cash_account_id == cash_account_id)
        return query.order_by(date_column.desc(), self.model.id.desc())

    def _is_posted(self, record) -> bool:
        return True

    def _validate_references(self, values: dict):
        ensure_exists(self.db, TourPackageQuery, values.get('tour_package_query_id'), "Tour package query")

    def _post(self, record, direction: int):
        if not self._is_posted(record):
            return
        self.banking.post(
            record.bank_account_id, record.cash_account_id,
            to_decimal(record.amount) * self.sign * direction
        )

    def create(self, data) -> object:
        values = data.model_dump(exclude={'images'})
        self._validate_references(values)
        record = self.model(**{k: v for k, v in values.items() if hasattr(self.model, k)})
        if self._is_posted(record):
            self.banking.resolve_account(record.bank_account_id, record.cash_account_id, self.label)
        self.db.add(record)
        self.db.flush()
        self._post(record, 1)
        return record

    def update(self, record_id: int, data):
        record = self.get_by_id(record_id)
        if not record:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'images'})
        current = {column.key: getattr(record, column.key) for column in self.model.__table__.columns}
        self._validate_references({**current, **update_data})

        # Revert the old posting, then apply the new one
        self._post(record, -1)
        for key, value in update_data.items():
            if value is None and key in ('amount', self.date_column):
                continue
            setattr(record, key, value)
        if self._is_posted(record):
            self.banking.resolve_account(record.bank_account_id, record.cash_account_id, self.label)
        self.db.flush()
        self._post(record, 1)
        return record

    def delete(self, record_id: int) -> bool:
        record = self.get_by_id(record_id)
        if not record:
            return False
        self._post(record, -1)
        self.db.delete(record)
        self.db.flush()
        return True


class ReceiptService(PostedRecordService):
    model = ReceiptDetail
    date_column = 'receipt_date'
    sign = 1
    label = "Receipt"

    def get_all(self, tour_package_query_id: int = None, customer_id: int = None,
                start_date: date = None, end_date: date = None,
                bank_account_id: int = None, cash_account_id: int = None) -> List[ReceiptDetail]:
        query = self._base_query(tour_package_query_id, start_date, end_date, bank_account_id, cash_account_id)
        if customer_id:
            query = query.filter(ReceiptDetail.customer_id == customer_id)
        return query.all()

    def _validate_references(self, values: dict):
        super()._validate_references(values)
        ensure_exists(self.db, Customer, values.get('customer_id'), "Customer")


class PaymentService(PostedRecordService):
    model = PaymentDetail
    date_column = 'payment_date'
    sign = -1
    label = "Payment"

    def get_all(self, tour_package_query_id: int = None, supplier_id: int = None,
                start_date: date = None, end_date: date = None,
                bank_account_id: int = None, cash_account_id: int = None) -> List[PaymentDetail]:
        query = self._base_query(tour_package_query_id, start_date, end_date, bank_account_id, cash_account_id)
        if supplier_id:
            query = query.filter(PaymentDetail.supplier_id == supplier_id)
        return query.all()

    def _validate_references(self, values: dict):
        super()._validate_references(values)
        ensure_exists(self.db, Supplier, values.get('supplier_id'), "Supplier")

    def delete(self, record_id: int) -> bool:
        payment = self.get_by_id(record_id)
        if payment and any(t.status == TdsStatus.DEPOSITED.value for t in payment.tds_transactions):
            raise ValueError("Cannot delete a payment whose TDS has been deposited")
        return super().delete(record_id)
