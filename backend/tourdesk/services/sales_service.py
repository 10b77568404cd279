"""
Sales Service - Sale Details, Sale Returns and their line items
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from datetime import date

from tourdesk.models import (
    SaleDetail, SaleItem, SaleReturn, SaleReturnItem, Customer,
    TourPackageQuery, TaxSlab, UnitOfMeasure
)
from tourdesk.schemas import SaleDetailCreate, SaleDetailUpdate, SaleReturnCreate, SaleReturnUpdate
from tourdesk.services.calculations import calculate_line_item
from tourdesk.services.common import ensure_exists, round2


def build_line_items(db: Session, item_model, items) -> list:
    """Line item rows; missing tax and totals are computed from the tax slab"""
    rows = []
    for item in items:
        slab = ensure_exists(db, TaxSlab, item.tax_slab_id, "Tax slab")
        ensure_exists(db, UnitOfMeasure, item.unit_of_measure_id, "Unit of measure")
        line = calculate_line_item(item.quantity, item.price_per_unit, slab.percentage if slab else None)

        tax_amount = item.tax_amount if item.tax_amount is not None else line['tax_amount']
        total_amount = item.total_amount
        if total_amount is None:
            total_amount = round2(line['subtotal'] + tax_amount)

        rows.append(item_model(
            product_name=item.product_name,
            description=item.description,
            quantity=item.quantity,
            unit_of_measure_id=item.unit_of_measure_id,
            price_per_unit=item.price_per_unit,
            tax_slab_id=item.tax_slab_id,
            tax_amount=tax_amount,
            total_amount=total_amount
        ))
    return rows


class SalesService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== SALES ====================

    def get_by_id(self, sale_id: int) -> Optional[SaleDetail]:
        return self.db.query(SaleDetail).options(
            joinedload(SaleDetail.items),
            joinedload(SaleDetail.customer)
        ).filter(SaleDetail.id == sale_id).first()

    def get_all(self, tour_package_query_id: int = None, customer_id: int = None,
                start_date: date = None, end_date: date = None) -> List[SaleDetail]:
        query = self.db.query(SaleDetail).options(joinedload(SaleDetail.customer))
        if tour_package_query_id:
            query = query.filter(SaleDetail.tour_package_query_id == tour_package_query_id)
        if customer_id:
            query = query.filter(SaleDetail.customer_id == customer_id)
        if start_date:
            query = query.filter(SaleDetail.sale_date >= start_date)
        if end_date:
            query = query.filter(SaleDetail.sale_date <= end_date)
        return query.order_by(SaleDetail.sale_date.desc(), SaleDetail.id.desc()).all()

    def _validate(self, values: dict):
        ensure_exists(self.db, TourPackageQuery, values.get('tour_package_query_id'), "Tour package query")
        ensure_exists(self.db, Customer, values.get('customer_id'), "Customer")

    def create(self, data: SaleDetailCreate) -> SaleDetail:
        values = data.model_dump(exclude={'items'})
        self._validate(values)
        values['status'] = data.status.value

        sale = SaleDetail(**values)
        sale.items = build_line_items(self.db, SaleItem, data.items)
        self.db.add(sale)
        self.db.flush()
        return sale

    def update(self, sale_id: int, data: SaleDetailUpdate) -> Optional[SaleDetail]:
        sale = self.get_by_id(sale_id)
        if not sale:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'items'})
        self._validate(update_data)
        if update_data.get('status') is not None:
            update_data['status'] = data.status.value
        for key, value in update_data.items():
            if value is None and key in ('sale_date', 'sale_price'):
                continue
            setattr(sale, key, value)

        if data.items is not None:
            sale.items = build_line_items(self.db, SaleItem, data.items)

        self.db.flush()
        return sale

    def delete(self, sale_id: int) -> bool:
        sale = self.get_by_id(sale_id)
        if not sale:
            return False
        self.db.delete(sale)
        self.db.flush()
        return True

    # ==================== SALE RETURNS ====================

    def get_return(self, return_id: int) -> Optional[SaleReturn]:
        return self.db.query(SaleReturn).options(
            joinedload(SaleReturn.items),
            joinedload(SaleReturn.sale_detail)
        ).filter(SaleReturn.id == return_id).first()

    def get_returns(self, sale_detail_id: int = None, tour_package_query_id: int = None,
                    customer_id: int = None, start_date: date = None, end_date: date = None) -> List[SaleReturn]:
        query = self.db.query(SaleReturn).join(SaleDetail).options(joinedload(SaleReturn.sale_detail))
        if sale_detail_id:
            query = query.filter(SaleReturn.sale_detail_id == sale_detail_id)
        if tour_package_query_id:
            query = query.filter(SaleDetail.tour_package_query_id == tour_package_query_id)
        if customer_id:
            query = query.filter(SaleDetail.customer_id == customer_id)
        if start_date:
            query = query.filter(SaleReturn.return_date >= start_date)
        if end_date:
            query = query.filter(SaleReturn.return_date <= end_date)
        return query.order_by(SaleReturn.return_date.desc(), SaleReturn.id.desc()).all()

    def create_return(self, data: SaleReturnCreate) -> SaleReturn:
        ensure_exists(self.db, SaleDetail, data.sale_detail_id, "Sale")
        values = data.model_dump(exclude={'items'})
        values['status'] = data.status.value

        sale_return = SaleReturn(**values)
        sale_return.items = build_line_items(self.db, SaleReturnItem, data.items)
        self.db.add(sale_return)
        self.db.flush()
        return sale_return

    def update_return(self, return_id: int, data: SaleReturnUpdate) -> Optional[SaleReturn]:
        sale_return = self.get_return(return_id)
        if not sale_return:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'items'})
        if update_data.get('status') is not None:
            update_data['status'] = data.status.value
        for key, value in update_data.items():
            if value is None and key in ('return_date', 'amount'):
                continue
            setattr(sale_return, key, value)
        if data.items is not None:
            sale_return.items = build_line_items(self.db, SaleReturnItem, data.items)

        self.db.flush()
        return sale_return

    def delete_return(self, return_id: int) -> bool:
        sale_return = self.get_return(return_id)
        if not sale_return:
            return False
        self.db.delete(sale_return)
        self.db.flush()
        return True
