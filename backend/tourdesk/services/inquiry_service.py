"""
Inquiry Service - customer enquiries, their follow-up actions and the
tour package queries started from them
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import or_
from datetime import date, datetime, time, timedelta
from decimal import Decimal
import logging

from tourdesk.models import Inquiry, InquiryAction, InquiryStatus, Location, TourPackageQuery
from tourdesk.schemas import (
    InquiryCreate, InquiryUpdate, InquiryActionCreate, QueryFromInquiryRequest,
    TourPackageQueryCreate
)
from tourdesk.services.common import ensure_exists, round2
from tourdesk.services.tour_package_query_service import TourPackageQueryService

logger = logging.getLogger(__name__)

STATUSES = [status.value for status in InquiryStatus]


def _counts() -> Dict[str, int]:
    return {'total': 0, **{status: 0 for status in STATUSES}}


def _conversion_rate(counts: Dict[str, int]) -> float:
    if not counts['total']:
        return 0.0
    return float(round2(Decimal(counts[InquiryStatus.CONFIRMED.value]) / counts['total'] * 100))


class InquiryService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, inquiry_id: int) -> Optional[Inquiry]:
        return self.db.query(Inquiry).options(
            selectinload(Inquiry.actions),
            selectinload(Inquiry.tour_package_queries),
            joinedload(Inquiry.location),
            joinedload(Inquiry.created_by)
        ).filter(Inquiry.id == inquiry_id).first()

    def get_all(self, status: str = None, location_id: int = None, created_by_id: int = None,
                start_date: date = None, end_date: date = None, search: str = None) -> List[Inquiry]:
        """Newest first; the date range applies to when the inquiry was logged"""
        query = self.db.query(Inquiry).options(
            joinedload(Inquiry.location),
            selectinload(Inquiry.tour_package_queries)
        )
        if status:
            query = query.filter(Inquiry.status == status)
        if location_id:
            query = query.filter(Inquiry.location_id == location_id)
        if created_by_id:
            query = query.filter(Inquiry.created_by_id == created_by_id)
        if start_date:
            query = query.filter(Inquiry.created_at >= datetime.combine(start_date, time.min))
        if end_date:
            query = query.filter(Inquiry.created_at < datetime.combine(end_date + timedelta(days=1), time.min))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Inquiry.customer_name.ilike(pattern),
                Inquiry.customer_mobile_number.ilike(pattern)
            ))
        return query.order_by(Inquiry.created_at.desc(), Inquiry.id.desc()).all()

    def create(self, data: InquiryCreate, created_by_id: int = None) -> Inquiry:
        ensure_exists(self.db, Location, data.location_id, "Location")
        values = data.model_dump()
        values['status'] = data.status.value

        inquiry = Inquiry(created_by_id=created_by_id, **values)
        self.db.add(inquiry)
        self.db.flush()
        logger.info(f"Inquiry {inquiry.id} logged for {inquiry.customer_name} ({inquiry.journey_date})")
        return inquiry

    def update(self, inquiry_id: int, data: InquiryUpdate) -> Optional[Inquiry]:
        inquiry = self.get_by_id(inquiry_id)
        if not inquiry:
            return None

        update_data = data.model_dump(exclude_unset=True)
        ensure_exists(self.db, Location, update_data.get('location_id'), "Location")
        if update_data.get('status') is not None:
            update_data['status'] = data.status.value
        for key, value in update_data.items():
            if value is None and key in ('customer_name', 'customer_mobile_number', 'location_id',
                                         'journey_date', 'status'):
                continue
            setattr(inquiry, key, value)

        self.db.flush()
        return inquiry

    def delete(self, inquiry_id: int) -> bool:
        """Actions go with the inquiry; queries started from it are kept and unlinked"""
        inquiry = self.get_by_id(inquiry_id)
        if not inquiry:
            return False

        self.db.query(TourPackageQuery).filter(
            TourPackageQuery.inquiry_id == inquiry_id
        ).update({TourPackageQuery.inquiry_id: None})
        self.db.delete(inquiry)
        self.db.flush()
        return True

    def add_action(self, inquiry_id: int, data: InquiryActionCreate) -> Optional[InquiryAction]:
        inquiry = self.get_by_id(inquiry_id)
        if not inquiry:
            return None

        action = InquiryAction(
            inquiry_id=inquiry_id,
            action_type=data.action_type,
            remarks=data.remarks,
            action_date=data.action_date or datetime.utcnow()
        )
        self.db.add(action)
        self.db.flush()
        return action

    def delete_action(self, inquiry_id: int, action_id: int) -> bool:
        action = self.db.query(InquiryAction).filter(
            InquiryAction.id == action_id,
            InquiryAction.inquiry_id == inquiry_id
        ).first()
        if not action:
            return False
        self.db.delete(action)
        self.db.flush()
        return True

    def create_query(self, inquiry_id: int, data: QueryFromInquiryRequest) -> Optional[TourPackageQuery]:
        """Start a tour package query prefilled with the inquiry's customer, place, date and party"""
        inquiry = self.get_by_id(inquiry_id)
        if not inquiry:
            return None

        name = data.tour_package_query_name or f"{inquiry.customer_name} - {inquiry.location.label}"
        query_data = TourPackageQueryCreate(
            tour_package_query_name=name,
            customer_name=inquiry.customer_name,
            customer_number=inquiry.customer_mobile_number,
            customer_id=data.customer_id,
            location_id=inquiry.location_id,
            inquiry_id=inquiry.id,
            tour_starts_from=inquiry.journey_date,
            tour_ends_on=data.tour_ends_on,
            num_adults=str(inquiry.num_adults or 0),
            num_child_5_to_12=str(inquiry.num_children_5_to_11 or 0),
            num_child_0_to_5=str(inquiry.num_children_below_5 or 0),
            remarks=inquiry.remarks
        )
        return TourPackageQueryService(self.db).create(query_data)

    def summary(self, start_date: date = None, end_date: date = None) -> Dict:
        """Inquiry counts by status, destination and the user who logged them"""
        inquiries = self.get_all(start_date=start_date, end_date=end_date)

        totals = _counts()
        by_location: Dict[str, Dict] = {}
        by_user: Dict[str, Dict] = {}
        with_queries = 0

        for inquiry in inquiries:
            location = inquiry.location.label if inquiry.location else "Unknown"
            user = inquiry.created_by.username if inquiry.created_by else "Direct"
            for bucket in (totals, by_location.setdefault(location, _counts()), by_user.setdefault(user, _counts())):
                bucket['total'] += 1
                bucket[inquiry.status] += 1
            if inquiry.tour_package_queries:
                with_queries += 1

        return {
            'start_date': start_date.isoformat() if start_date else None,
            'end_date': end_date.isoformat() if end_date else None,
            'totals': totals,
            'conversion_rate': _conversion_rate(totals),
            'with_queries': with_queries,
            'by_location': [
                {'location': name, **counts, 'conversion_rate': _conversion_rate(counts)}
                for name, counts in sorted(by_location.items())
            ],
            'by_user': [
                {'username': name, **counts, 'conversion_rate': _conversion_rate(counts)}
                for name, counts in sorted(by_user.items())
            ],
        }
