"""
CRM API Routes - Customers and Suppliers
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import CustomerCreate, CustomerUpdate, SupplierCreate, SupplierUpdate
from tourdesk.services.crm_service import CustomerService, SupplierService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import columns_dict

router = APIRouter(prefix="/crm", tags=["CRM"])


# ==================== CUSTOMERS ====================

@router.get("/customers")
async def list_customers(
    search: str = None,
    include_inactive: bool = True,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List all customers"""
    return [columns_dict(c) for c in CustomerService(db).get_all(search, include_inactive)]


@router.get("/customers/{customer_id}")
async def get_customer(
    customer_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    customer = CustomerService(db).get_by_id(customer_id)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    return columns_dict(customer)


@router.post("/customers", dependencies=[Depends(PermissionChecker(["crm:create"]))])
async def create_customer(
    customer_data: CustomerCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    customer = CustomerService(db).create(customer_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "Customer", customer.id,
        f"Created customer '{customer.name}'"
    )
    db.commit()
    db.refresh(customer)
    return columns_dict(customer)


@router.patch("/customers/{customer_id}", dependencies=[Depends(PermissionChecker(["crm:edit"]))])
async def update_customer(
    customer_id: int,
    customer_data: CustomerUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    customer = CustomerService(db).update(customer_id, customer_data)
    if not customer:
        raise HTTPException(status_code=404, detail="Customer not found")
    db.commit()
    db.refresh(customer)
    return columns_dict(customer)


@router.delete("/customers/{customer_id}", dependencies=[Depends(PermissionChecker(["crm:delete"]))])
async def delete_customer(
    customer_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = CustomerService(db).delete(customer_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Customer not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "Customer", customer_id)
    db.commit()
    return {"message": "Customer deleted successfully"}


# ==================== SUPPLIERS ====================

@router.get("/suppliers")
async def list_suppliers(
    search: str = None,
    include_inactive: bool = True,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List all suppliers"""
    return [columns_dict(s) for s in SupplierService(db).get_all(search, include_inactive)]


@router.get("/suppliers/{supplier_id}")
async def get_supplier(
    supplier_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    supplier = SupplierService(db).get_by_id(supplier_id)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return columns_dict(supplier)


@router.post("/suppliers", dependencies=[Depends(PermissionChecker(["crm:create"]))])
async def create_supplier(
    supplier_data: SupplierCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    supplier = SupplierService(db).create(supplier_data)
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "Supplier", supplier.id,
        f"Created supplier '{supplier.name}'"
    )
    db.commit()
    db.refresh(supplier)
    return columns_dict(supplier)


@router.patch("/suppliers/{supplier_id}", dependencies=[Depends(PermissionChecker(["crm:edit"]))])
async def update_supplier(
    supplier_id: int,
    supplier_data: SupplierUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    supplier = SupplierService(db).update(supplier_id, supplier_data)
    if not supplier:
        raise HTTPException(status_code=404, detail="Supplier not found")
    db.commit()
    db.refresh(supplier)
    return columns_dict(supplier)


@router.delete("/suppliers/{supplier_id}", dependencies=[Depends(PermissionChecker(["crm:delete"]))])
async def delete_supplier(
    supplier_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = SupplierService(db).delete(supplier_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Supplier not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "Supplier", supplier_id)
    db.commit()
    return {"message": "Supplier deleted successfully"}
