"""
TDS Service - tax deducted at source on supplier payments and the challans
it is deposited under
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload, selectinload
from datetime import date, datetime
import logging

from tourdesk.models import TdsTransaction, TdsChallan, TdsStatus, PaymentDetail
from tourdesk.schemas import TdsTransactionCreate, TdsChallanCreate
from tourdesk.services.calculations import tds_amount, financial_period

logger = logging.getLogger(__name__)

DEPOSITED = TdsStatus.DEPOSITED.value


class TdsService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== TRANSACTIONS ====================

    def get_transaction(self, transaction_id: int) -> Optional[TdsTransaction]:
        return self.db.query(TdsTransaction).filter(TdsTransaction.id == transaction_id).first()

    def get_transactions(self, status: str = None, challan_id: int = None, payment_detail_id: int = None,
                         supplier_id: int = None, financial_year: str = None,
                         quarter: str = None) -> List[TdsTransaction]:
        query = self.db.query(TdsTransaction).options(joinedload(TdsTransaction.supplier))
        if status:
            query = query.filter(TdsTransaction.status == status)
        if challan_id:
            query = query.filter(TdsTransaction.challan_id == challan_id)
        if payment_detail_id:
            query = query.filter(TdsTransaction.payment_detail_id == payment_detail_id)
        if supplier_id:
            query = query.filter(TdsTransaction.supplier_id == supplier_id)
        if financial_year:
            query = query.filter(TdsTransaction.financial_year == financial_year)
        if quarter:
            query = query.filter(TdsTransaction.quarter == quarter)
        return query.order_by(TdsTransaction.created_at.desc(), TdsTransaction.id.desc()).all()

    def create_transaction(self, data: TdsTransactionCreate) -> TdsTransaction:
        """
        Record tax withheld from a payment. The base defaults to the payment
        amount and the tax to base x rate; the period follows the payment date.
        """
        payment = self.db.query(PaymentDetail).filter(PaymentDetail.id == data.payment_detail_id).first()
        if payment is None:
            raise ValueError(f"Payment {data.payment_detail_id} not found")

        base = data.base_amount if data.base_amount is not None else payment.amount
        year, quarter = financial_period(payment.payment_date)
        transaction = TdsTransaction(
            payment_detail_id=payment.id,
            supplier_id=payment.supplier_id,
            section_code=data.section_code,
            tds_type=data.tds_type.value,
            base_amount=base,
            applied_rate=data.applied_rate,
            tds_amount=data.tds_amount if data.tds_amount is not None else tds_amount(base, data.applied_rate),
            financial_year=year,
            quarter=quarter,
            pan=data.pan,
            notes=data.notes
        )
        self.db.add(transaction)
        self.db.flush()
        return transaction

    def delete_transaction(self, transaction_id: int) -> bool:
        transaction = self.get_transaction(transaction_id)
        if not transaction:
            return False
        if transaction.status == DEPOSITED:
            raise ValueError("Cannot delete a deposited TDS transaction")
        self.db.delete(transaction)
        self.db.flush()
        return True

    # ==================== CHALLANS ====================

    def get_challan(self, challan_id: int) -> Optional[TdsChallan]:
        return self.db.query(TdsChallan).options(
            selectinload(TdsChallan.transactions).joinedload(TdsTransaction.supplier)
        ).filter(TdsChallan.id == challan_id, TdsChallan.deleted_at.is_(None)).first()

    def get_challans(self) -> List[TdsChallan]:
        """Live challans, latest deposit first and undeposited ones last"""
        return self.db.query(TdsChallan).options(
            selectinload(TdsChallan.transactions)
        ).filter(TdsChallan.deleted_at.is_(None)).order_by(
            TdsChallan.deposit_date.is_(None), TdsChallan.deposit_date.desc(), TdsChallan.id.desc()
        ).all()

    def _attach(self, challan: TdsChallan, transaction_ids: List[int]):
        transactions = self.db.query(TdsTransaction).filter(TdsTransaction.id.in_(transaction_ids)).all()
        missing = set(transaction_ids) - {t.id for t in transactions}
        if missing:
            raise ValueError(f"TDS transactions not found: {sorted(missing)}")
        for transaction in transactions:
            if transaction.challan_id not in (None, challan.id):
                raise ValueError(f"TDS transaction {transaction.id} is already on challan {transaction.challan_id}")
            transaction.challan_id = challan.id
            transaction.status = DEPOSITED

    def create_challan(self, data: TdsChallanCreate, updated_by: str = None) -> TdsChallan:
        values = data.model_dump(exclude={'transaction_ids'})
        challan = TdsChallan(updated_by=updated_by, **values)
        self.db.add(challan)
        self.db.flush()
        if data.transaction_ids:
            self._attach(challan, data.transaction_ids)
            self.db.flush()
        return challan

    def attach_transactions(self, challan_id: int, transaction_ids: List[int],
                            updated_by: str = None) -> Optional[TdsChallan]:
        challan = self.get_challan(challan_id)
        if not challan:
            return None
        self._attach(challan, transaction_ids)
        challan.updated_by = updated_by
        self.db.flush()
        return challan

    def mark_deposited(self, challan_id: int, deposit_date: date = None,
                       updated_by: str = None) -> Optional[TdsChallan]:
        challan = self.get_challan(challan_id)
        if not challan:
            return None
        challan.deposit_date = deposit_date or date.today()
        challan.updated_by = updated_by
        for transaction in challan.transactions:
            transaction.status = DEPOSITED
        self.db.flush()
        logger.info(f"TDS challan {challan.id} deposited on {challan.deposit_date}")
        return challan

    def delete_challan(self, challan_id: int, updated_by: str = None) -> bool:
        challan = self.get_challan(challan_id)
        if not challan:
            return False
        if any(t.status == DEPOSITED for t in challan.transactions):
            raise ValueError("Cannot delete challan with deposited transactions")
        challan.deleted_at = datetime.utcnow()
        challan.updated_by = updated_by
        self.db.flush()
        return True
