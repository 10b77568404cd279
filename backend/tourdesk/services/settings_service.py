"""
Settings Service - lookup master data
"""
from typing import Optional, List
from sqlalchemy.orm import Session

from tourdesk.models import (
    RoomType, OccupancyType, MealPlan, VehicleType, PricingAttribute, TaxSlab,
    UnitOfMeasure, ExpenseCategory, IncomeCategory, HotelPricing, RoomAllocation,
    TransportPricing, TransportDetail, TourPackagePricing, PricingComponent,
    SaleItem, PurchaseItem, SaleReturnItem, PurchaseReturnItem, ExpenseDetail,
    IncomeDetail
)
from tourdesk.schemas import LookupCreate, LookupUpdate

# kind in the URL -> (model, [(referencing model, foreign key column)])
LOOKUPS = {
    "room-types": (RoomType, [
        (HotelPricing, HotelPricing.room_type_id),
        (RoomAllocation, RoomAllocation.room_type_id),
    ]),
    "occupancy-types": (OccupancyType, [
        (HotelPricing, HotelPricing.occupancy_type_id),
        (RoomAllocation, RoomAllocation.occupancy_type_id),
    ]),
    "meal-plans": (MealPlan, [
        (HotelPricing, HotelPricing.meal_plan_id),
        (RoomAllocation, RoomAllocation.meal_plan_id),
        (TourPackagePricing, TourPackagePricing.meal_plan_id),
    ]),
    "vehicle-types": (VehicleType, [
        (TransportPricing, TransportPricing.vehicle_type_id),
        (TransportDetail, TransportDetail.vehicle_type_id),
        (TourPackagePricing, TourPackagePricing.vehicle_type_id),
    ]),
    "pricing-attributes": (PricingAttribute, [
        (PricingComponent, PricingComponent.pricing_attribute_id),
    ]),
    "tax-slabs": (TaxSlab, [
        (SaleItem, SaleItem.tax_slab_id),
        (PurchaseItem, PurchaseItem.tax_slab_id),
        (SaleReturnItem, SaleReturnItem.tax_slab_id),
        (PurchaseReturnItem, PurchaseReturnItem.tax_slab_id),
    ]),
    "units": (UnitOfMeasure, [
        (SaleItem, SaleItem.unit_of_measure_id),
        (PurchaseItem, PurchaseItem.unit_of_measure_id),
        (SaleReturnItem, SaleReturnItem.unit_of_measure_id),
        (PurchaseReturnItem, PurchaseReturnItem.unit_of_measure_id),
    ]),
    "expense-categories": (ExpenseCategory, [
        (ExpenseDetail, ExpenseDetail.expense_category_id),
    ]),
    "income-categories": (IncomeCategory, [
        (IncomeDetail, IncomeDetail.income_category_id),
    ]),
}


class SettingsService:
    """CRUD over the lookup tables, addressed by their URL kind"""

    def __init__(self, db: Session, kind: str):
        if kind not in LOOKUPS:
            raise KeyError(kind)
        self.db = db
        self.kind = kind
        self.model, self.references = LOOKUPS[kind]

    def _ordering(self):
        for column in ('sort_order', 'rank'):
            if hasattr(self.model, column):
                return [getattr(self.model, column), self.model.name]
        return [self.model.name]

    def get_all(self, include_inactive: bool = False) -> List:
        query = self.db.query(self.model)
        if not include_inactive:
            query = query.filter(self.model.is_active == True)
        return query.order_by(*self._ordering()).all()

    def get_by_id(self, record_id: int):
        return self.db.query(self.model).filter(self.model.id == record_id).first()

    def get_by_name(self, name: str):
        return self.db.query(self.model).filter(self.model.name == name).first()

    def _columns(self, values: dict) -> dict:
        return {
            key: value for key, value in values.items()
            if hasattr(self.model, key) and not (value is None and key in ('name', 'is_active'))
        }

    def create(self, data: LookupCreate):
        if self.get_by_name(data.name):
            raise ValueError(f"'{data.name}' already exists")
        values = self._columns(data.model_dump(exclude_none=True))
        record = self.model(**values)
        self.db.add(record)
        self.db.flush()
        return record

    def update(self, record_id: int, data: LookupUpdate):
        record = self.get_by_id(record_id)
        if not record:
            return None
        update_data = self._columns(data.model_dump(exclude_unset=True))
        if update_data.get('name') and update_data['name'] != record.name:
            if self.get_by_name(update_data['name']):
                raise ValueError(f"'{update_data['name']}' already exists")
        for key, value in update_data.items():
            setattr(record, key, value)
        self.db.flush()
        return record

    def is_in_use(self, record_id: int) -> bool:
        return any(
            self.db.query(model.id).filter(column == record_id).first() is not None
            for model, column in self.references
        )

    def delete(self, record_id: int) -> Optional[str]:
        """
        Delete a lookup row, or deactivate it when other records still use it.
        Returns 'deleted', 'deactivated' or None when not found.
        """
        record = self.get_by_id(record_id)
        if not record:
            return None
        if self.is_in_use(record_id):
            record.is_active = False
            self.db.flush()
            return "deactivated"
        self.db.delete(record)
        self.db.flush()
        return "deleted"
