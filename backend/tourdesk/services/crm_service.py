"""
CRM Service - Business Logic for Customers and Suppliers
"""
from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import or_

from tourdesk.models import (
    Customer, Supplier, SaleDetail, ReceiptDetail, PurchaseDetail, PaymentDetail,
    TourPackageQuery
)
from tourdesk.schemas import CustomerCreate, CustomerUpdate, SupplierCreate, SupplierUpdate


class CustomerService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, customer_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_all(self, search: str = None, include_inactive: bool = True) -> List[Customer]:
        query = self.db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Customer.name.ilike(pattern), Customer.contact.ilike(pattern)))
        if not include_inactive:
            query = query.filter(Customer.is_active == True)
        return query.order_by(Customer.name).all()

    def create(self, customer_data: CustomerCreate) -> Customer:
        customer = Customer(**customer_data.model_dump())
        self.db.add(customer)
        self.db.flush()
        return customer

    def update(self, customer_id: int, customer_data: CustomerUpdate) -> Optional[Customer]:
        customer = self.get_by_id(customer_id)
        if not customer:
            return None

        update_data = customer_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(customer, key, value)

        self.db.flush()
        return customer

    def delete(self, customer_id: int) -> bool:
        customer = self.get_by_id(customer_id)
        if not customer:
            return False

        has_sales = self.db.query(SaleDetail.id).filter(SaleDetail.customer_id == customer_id).first()
        has_receipts = self.db.query(ReceiptDetail.id).filter(ReceiptDetail.customer_id == customer_id).first()
        if has_sales or has_receipts:
            raise ValueError("Cannot delete customer with existing financial records")

        self.db.query(TourPackageQuery).filter(
            TourPackageQuery.customer_id == customer_id
        ).update({TourPackageQuery.customer_id: None})
        self.db.delete(customer)
        self.db.flush()
        return True


class SupplierService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, supplier_id: int) -> Optional[Supplier]:
        return self.db.query(Supplier).filter(Supplier.id == supplier_id).first()

    def get_all(self, search: str = None, include_inactive: bool = True) -> List[Supplier]:
        query = self.db.query(Supplier)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Supplier.name.ilike(pattern), Supplier.contact.ilike(pattern)))
        if not include_inactive:
            query = query.filter(Supplier.is_active == True)
        return query.order_by(Supplier.name).all()

    def create(self, supplier_data: SupplierCreate) -> Supplier:
        supplier = Supplier(**supplier_data.model_dump())
        self.db.add(supplier)
        self.db.flush()
        return supplier

    def update(self, supplier_id: int, supplier_data: SupplierUpdate) -> Optional[Supplier]:
        supplier = self.get_by_id(supplier_id)
        if not supplier:
            return None

        update_data = supplier_data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(supplier, key, value)

        self.db.flush()
        return supplier

    def delete(self, supplier_id: int) -> bool:
        supplier = self.get_by_id(supplier_id)
        if not supplier:
            return False

        has_purchases = self.db.query(PurchaseDetail.id).filter(PurchaseDetail.supplier_id == supplier_id).first()
        has_payments = self.db.query(PaymentDetail.id).filter(PaymentDetail.supplier_id == supplier_id).first()
        if has_purchases or has_payments:
            raise ValueError("Cannot delete supplier with existing financial records")

        self.db.delete(supplier)
        self.db.flush()
        return True
