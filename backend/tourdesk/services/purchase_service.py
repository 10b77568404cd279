"""
Purchase Service - Purchase Details, Purchase Returns and their line items
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from datetime import date

from tourdesk.models import (
    PurchaseDetail, PurchaseItem, PurchaseReturn, PurchaseReturnItem,
    Supplier, TourPackageQuery
)
from tourdesk.schemas import (
    PurchaseDetailCreate, PurchaseDetailUpdate, PurchaseReturnCreate, PurchaseReturnUpdate
)
from tourdesk.services.common import ensure_exists
from tourdesk.services.sales_service import build_line_items


class PurchaseService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== PURCHASES ====================

    def get_by_id(self, purchase_id: int) -> Optional[PurchaseDetail]:
        return self.db.query(PurchaseDetail).options(
            joinedload(PurchaseDetail.items),
            joinedload(PurchaseDetail.supplier)
        ).filter(PurchaseDetail.id == purchase_id).first()

    def get_all(self, tour_package_query_id: int = None, supplier_id: int = None,
                start_date: date = None, end_date: date = None) -> List[PurchaseDetail]:
        query = self.db.query(PurchaseDetail).options(joinedload(PurchaseDetail.supplier))
        if tour_package_query_id:
            query = query.filter(PurchaseDetail.tour_package_query_id == tour_package_query_id)
        if supplier_id:
            query = query.filter(PurchaseDetail.supplier_id == supplier_id)
        if start_date:
            query = query.filter(PurchaseDetail.purchase_date >= start_date)
        if end_date:
            query = query.filter(PurchaseDetail.purchase_date <= end_date)
        return query.order_by(PurchaseDetail.purchase_date.desc(), PurchaseDetail.id.desc()).all()

    def _validate(self, values: dict):
        ensure_exists(self.db, TourPackageQuery, values.get('tour_package_query_id'), "Tour package query")
        ensure_exists(self.db, Supplier, values.get('supplier_id'), "Supplier")

    def create(self, data: PurchaseDetailCreate) -> PurchaseDetail:
        values = data.model_dump(exclude={'items'})
        self._validate(values)
        values['status'] = data.status.value

        purchase = PurchaseDetail(**values)
        purchase.items = build_line_items(self.db, PurchaseItem, data.items)
        self.db.add(purchase)
        self.db.flush()
        return purchase

    def update(self, purchase_id: int, data: PurchaseDetailUpdate) -> Optional[PurchaseDetail]:
        purchase = self.get_by_id(purchase_id)
        if not purchase:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'items'})
        self._validate(update_data)
        if update_data.get('status') is not None:
            update_data['status'] = data.status.value
        for key, value in update_data.items():
            if value is None and key in ('purchase_date', 'price'):
                continue
            setattr(purchase, key, value)

        if data.items is not None:
            purchase.items = build_line_items(self.db, PurchaseItem, data.items)

        self.db.flush()
        return purchase

    def delete(self, purchase_id: int) -> bool:
        purchase = self.get_by_id(purchase_id)
        if not purchase:
            return False
        self.db.delete(purchase)
        self.db.flush()
        return True

    # ==================== PURCHASE RETURNS ====================

    def get_return(self, return_id: int) -> Optional[PurchaseReturn]:
        return self.db.query(PurchaseReturn).options(
            joinedload(PurchaseReturn.items),
            joinedload(PurchaseReturn.purchase_detail)
        ).filter(PurchaseReturn.id == return_id).first()

    def get_returns(self, purchase_detail_id: int = None, tour_package_query_id: int = None,
                    supplier_id: int = None, start_date: date = None, end_date: date = None) -> List[PurchaseReturn]:
        query = self.db.query(PurchaseReturn).join(PurchaseDetail).options(joinedload(PurchaseReturn.purchase_detail))
        if purchase_detail_id:
            query = query.filter(PurchaseReturn.purchase_detail_id == purchase_detail_id)
        if tour_package_query_id:
            query = query.filter(PurchaseDetail.tour_package_query_id == tour_package_query_id)
        if supplier_id:
            query = query.filter(PurchaseDetail.supplier_id == supplier_id)
        if start_date:
            query = query.filter(PurchaseReturn.return_date >= start_date)
        if end_date:
            query = query.filter(PurchaseReturn.return_date <= end_date)
        return query.order_by(PurchaseReturn.return_date.desc(), PurchaseReturn.id.desc()).all()

    def create_return(self, data: PurchaseReturnCreate) -> PurchaseReturn:
        ensure_exists(self.db, PurchaseDetail, data.purchase_detail_id, "Purchase")
        values = data.model_dump(exclude={'items'})
        values['status'] = data.status.value

        purchase_return = PurchaseReturn(**values)
        purchase_return.items = build_line_items(self.db, PurchaseReturnItem, data.items)
        self.db.add(purchase_return)
        self.db.flush()
        return purchase_return

    def update_return(self, return_id: int, data: PurchaseReturnUpdate) -> Optional[PurchaseReturn]:
        purchase_return = self.get_return(return_id)
        if not purchase_return:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'items'})
        if update_data.get('status') is not None:
            update_data['status'] = data.status.value
        for key, value in update_data.items():
            if value is None and key in ('return_date', 'amount'):
                continue
            setattr(purchase_return, key, value)
        if data.items is not None:
            purchase_return.items = build_line_items(self.db, PurchaseReturnItem, data.items)

        self.db.flush()
        return purchase_return

    def delete_return(self, return_id: int) -> bool:
        purchase_return = self.get_return(return_id)
        if not purchase_return:
            return False
        self.db.delete(purchase_return)
        self.db.flush()
        return True
