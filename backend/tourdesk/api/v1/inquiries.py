"""
Inquiries API Routes - customer enquiries, follow-ups and conversion into queries
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import (
    InquiryCreate, InquiryUpdate, InquiryActionCreate, InquiryStatusEnum, QueryFromInquiryRequest
)
from tourdesk.services.inquiry_service import InquiryService
from tourdesk.services.tour_package_query_service import TourPackageQueryService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import inquiry_dict, inquiry_summary, query_dict, columns_dict

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])


def get_inquiry_or_404(service: InquiryService, inquiry_id: int):
    inquiry = service.get_by_id(inquiry_id)
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return inquiry


@router.get("")
async def list_inquiries(
    status: InquiryStatusEnum = None,
    location_id: int = None,
    created_by_id: int = None,
    start_date: date = None,
    end_date: date = None,
    search: str = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List inquiries, newest first"""
    inquiries = InquiryService(db).get_all(
        status.value if status else None, location_id, created_by_id, start_date, end_date, search
    )
    return [inquiry_summary(i) for i in inquiries]


@router.get("/summary")
async def get_inquiry_summary(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Counts and conversion rates by status, destination and user"""
    return InquiryService(db).summary(start_date, end_date)


@router.get("/{inquiry_id}")
async def get_inquiry(
    inquiry_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return inquiry_dict(get_inquiry_or_404(InquiryService(db), inquiry_id))


@router.post("", dependencies=[Depends(PermissionChecker(["inquiries:create"]))])
async def create_inquiry(
    inquiry_data: InquiryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = InquiryService(db)
    try:
        inquiry = service.create(inquiry_data, current_user.id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "Inquiry", inquiry.id,
        f"Logged inquiry from {inquiry.customer_name}"
    )
    db.commit()
    return inquiry_dict(get_inquiry_or_404(service, inquiry.id))


@router.patch("/{inquiry_id}", dependencies=[Depends(PermissionChecker(["inquiries:edit"]))])
async def update_inquiry(
    inquiry_id: int,
    inquiry_data: InquiryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = InquiryService(db)
    inquiry = get_inquiry_or_404(service, inquiry_id)
    old_values = columns_dict(inquiry)
    try:
        inquiry = service.update(inquiry_id, inquiry_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.UPDATE, "Inquiry", inquiry_id,
        old_values=old_values, new_values=columns_dict(inquiry)
    )
    db.commit()
    db.expire_all()
    return inquiry_dict(get_inquiry_or_404(service, inquiry_id))


@router.delete("/{inquiry_id}", dependencies=[Depends(PermissionChecker(["inquiries:delete"]))])
async def delete_inquiry(
    inquiry_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not InquiryService(db).delete(inquiry_id):
        raise HTTPException(status_code=404, detail="Inquiry not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "Inquiry", inquiry_id)
    db.commit()
    return {"message": "Inquiry deleted successfully"}


# ==================== ACTIONS ====================

@router.post("/{inquiry_id}/actions", dependencies=[Depends(PermissionChecker(["inquiries:edit"]))])
async def add_inquiry_action(
    inquiry_id: int,
    action_data: InquiryActionCreate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Log a follow-up against an inquiry"""
    action = InquiryService(db).add_action(inquiry_id, action_data)
    if not action:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    db.commit()
    db.refresh(action)
    return columns_dict(action)


@router.delete("/{inquiry_id}/actions/{action_id}", dependencies=[Depends(PermissionChecker(["inquiries:edit"]))])
async def delete_inquiry_action(
    inquiry_id: int,
    action_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    if not InquiryService(db).delete_action(inquiry_id, action_id):
        raise HTTPException(status_code=404, detail="Inquiry action not found")
    db.commit()
    return {"message": "Inquiry action deleted successfully"}


# ==================== CONVERSION ====================

@router.post("/{inquiry_id}/tour-package-query", dependencies=[Depends(PermissionChecker(["queries:create"]))])
async def create_query_from_inquiry(
    inquiry_id: int,
    query_data: QueryFromInquiryRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Start a tour package query from an inquiry"""
    try:
        tour_query = InquiryService(db).create_query(inquiry_id, query_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not tour_query:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TourPackageQuery", tour_query.id,
        f"Created query {tour_query.tour_package_query_number} from inquiry {inquiry_id}"
    )
    db.commit()
    return query_dict(TourPackageQueryService(db).get_by_id(tour_query.id))
