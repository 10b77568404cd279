"""
Tour Package Queries API Routes - customer bookings, variant snapshots and per-query accounts
"""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.schemas import (
    TourPackageQueryCreate, TourPackageQueryUpdate, QueryFromPackageRequest,
    VariantSnapshotRequest, QueryAccountingUpdate
)
from tourdesk.services.tour_package_query_service import TourPackageQueryService
from tourdesk.services.document_service import DocumentService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.api.v1.serializers import (
    query_dict, query_summary, snapshot_dict, accounts_dict, attachment
)

router = APIRouter(prefix="/tour-package-queries", tags=["Tour Package Queries"])


def get_query_or_404(service: TourPackageQueryService, query_id: int):
    tour_query = service.get_by_id(query_id)
    if not tour_query:
        raise HTTPException(status_code=404, detail="Tour package query not found")
    return tour_query


@router.get("")
async def list_queries(
    archived: bool = None,
    customer_name: str = None,
    start_date: date = None,
    end_date: date = None,
    assigned_to: str = None,
    search: str = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """List queries, newest first"""
    queries = TourPackageQueryService(db).get_all(
        archived, customer_name, start_date, end_date, assigned_to, search
    )
    return [query_summary(q) for q in queries]


@router.get("/next-number")
async def get_next_query_number(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return {"tour_package_query_number": TourPackageQueryService(db).get_next_number()}


@router.get("/{query_id}")
async def get_query(
    query_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return query_dict(get_query_or_404(TourPackageQueryService(db), query_id))


@router.post("", dependencies=[Depends(PermissionChecker(["queries:create"]))])
async def create_query(
    query_data: TourPackageQueryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageQueryService(db)
    try:
        tour_query = service.create(query_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TourPackageQuery", tour_query.id,
        f"Created query {tour_query.tour_package_query_number}"
    )
    db.commit()
    return query_dict(get_query_or_404(service, tour_query.id))


@router.post("/from-tour-package/{package_id}", dependencies=[Depends(PermissionChecker(["queries:create"]))])
async def create_query_from_package(
    package_id: int,
    query_data: QueryFromPackageRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Start a query from a package template, optionally snapshotting variants"""
    service = TourPackageQueryService(db)
    try:
        tour_query = service.create_from_tour_package(package_id, query_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not tour_query:
        raise HTTPException(status_code=404, detail="Tour package not found")
    AuditService(db).log_request(
        request, current_user, AuditAction.CREATE, "TourPackageQuery", tour_query.id,
        f"Created query {tour_query.tour_package_query_number} from tour package {package_id}"
    )
    db.commit()
    return query_dict(get_query_or_404(service, tour_query.id))


@router.patch("/{query_id}", dependencies=[Depends(PermissionChecker(["queries:edit"]))])
async def update_query(
    query_id: int,
    query_data: TourPackageQueryUpdate,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageQueryService(db)
    try:
        tour_query = service.update(query_id, query_data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not tour_query:
        raise HTTPException(status_code=404, detail="Tour package query not found")
    db.commit()
    db.expire_all()
    return query_dict(get_query_or_404(service, query_id))


@router.delete("/{query_id}", dependencies=[Depends(PermissionChecker(["queries:delete"]))])
async def delete_query(
    query_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    try:
        deleted = TourPackageQueryService(db).delete(query_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Tour package query not found")
    AuditService(db).log_request(request, current_user, AuditAction.DELETE, "TourPackageQuery", query_id)
    db.commit()
    return {"message": "Tour package query deleted successfully"}


@router.get("/{query_id}/pdf")
async def download_query_pdf(
    query_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Customer facing itinerary document"""
    tour_query = get_query_or_404(TourPackageQueryService(db), query_id)
    content = DocumentService().render_tour_package_query(tour_query)
    filename = f"{tour_query.tour_package_query_number or f'query_{query_id}'}.pdf"
    return attachment(content, filename, "application/pdf")


# ==================== VARIANT SNAPSHOTS ====================

@router.get("/{query_id}/variant-snapshots")
async def list_variant_snapshots(
    query_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageQueryService(db)
    get_query_or_404(service, query_id)
    return [snapshot_dict(s) for s in service.get_variant_snapshots(query_id)]


@router.post("/{query_id}/variant-snapshots", dependencies=[Depends(PermissionChecker(["queries:edit"]))])
async def create_variant_snapshots(
    query_id: int,
    snapshot_data: VariantSnapshotRequest,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Freeze package variants with their hotels and pricing onto the query"""
    service = TourPackageQueryService(db)
    try:
        created = service.create_variant_snapshots(query_id, snapshot_data.variant_ids, snapshot_data.overwrite)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if created is None:
        raise HTTPException(status_code=404, detail="Tour package query not found")
    db.commit()
    return {
        "created": len(created),
        "variant_snapshots": [snapshot_dict(s) for s in service.get_variant_snapshots(query_id)]
    }


@router.delete("/{query_id}/variant-snapshots", dependencies=[Depends(PermissionChecker(["queries:edit"]))])
async def delete_variant_snapshots(
    query_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    service = TourPackageQueryService(db)
    get_query_or_404(service, query_id)
    removed = service.delete_variant_snapshots(query_id)
    db.commit()
    return {"message": f"{removed} variant snapshot(s) deleted", "deleted": removed}


# ==================== ACCOUNTS ====================

@router.get("/{query_id}/accounts", dependencies=[Depends(PermissionChecker(["reports:view"]))])
async def get_query_accounts(
    query_id: int,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """All financial records of the query with totals, profit and outstanding balances"""
    accounts = TourPackageQueryService(db).get_accounts(query_id)
    if not accounts:
        raise HTTPException(status_code=404, detail="Tour package query not found")
    return accounts_dict(accounts)


@router.patch("/{query_id}/accounting", dependencies=[Depends(PermissionChecker(["sales:edit", "purchases:edit"]))])
async def replace_query_accounting(
    query_id: int,
    accounting_data: QueryAccountingUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Replace the query's records of each supplied kind, reposting account balances"""
    service = TourPackageQueryService(db)
    try:
        tour_query = service.replace_accounting(query_id, accounting_data)
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    if not tour_query:
        raise HTTPException(status_code=404, detail="Tour package query not found")

    replaced = sorted(accounting_data.model_dump(exclude_none=True).keys())
    AuditService(db).log_request(
        request, current_user, AuditAction.ACCOUNTING_REPLACED, "TourPackageQuery", query_id,
        f"Replaced {', '.join(replaced) or 'nothing'} on query {tour_query.tour_package_query_number}",
        new_values={field: len(getattr(accounting_data, field)) for field in replaced}
    )
    db.commit()
    return accounts_dict(service.get_accounts(query_id))
