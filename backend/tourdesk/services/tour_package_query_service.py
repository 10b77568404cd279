"""
Tour Package Query Service - customer booking records, variant snapshots
and the accounting scoped to a query
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload, selectinload
from sqlalchemy import or_
from datetime import date
from decimal import Decimal
import logging

from tourdesk.models import (
    TourPackageQuery, TourPackage, Itinerary, Image, Location, Customer, MealPlan,
    PackageVariant, VariantHotelMapping, Hotel, QueryVariantSnapshot,
    QueryVariantHotelSnapshot, QueryVariantPricingSnapshot,
    QueryVariantPricingComponentSnapshot, TourPackagePricing, PricingComponent,
    SaleDetail, PurchaseDetail, ReceiptDetail, PaymentDetail, ExpenseDetail,
    IncomeDetail, SaleReturn, PurchaseReturn, Inquiry
)
from tourdesk.schemas import (
    TourPackageQueryCreate, TourPackageQueryUpdate, QueryFromPackageRequest,
    QueryAccountingUpdate
)
from tourdesk.services.common import ensure_exists, next_number, to_decimal
from tourdesk.services.calculations import summarize_finances
from tourdesk.services.tour_package_service import (
    build_itineraries, build_flights, copy_itinerary, copy_flight, PACKAGE_COPY_FIELDS
)
from tourdesk.services.sales_service import SalesService
from tourdesk.services.purchase_service import PurchaseService
from tourdesk.services.receipt_service import ReceiptService, PaymentService
from tourdesk.services.expense_service import ExpenseService, IncomeService

logger = logging.getLogger(__name__)

NESTED_FIELDS = {'itineraries', 'flight_details', 'images'}


class TourPackageQueryService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== QUERIES ====================

    def get_by_id(self, query_id: int) -> Optional[TourPackageQuery]:
        return self.db.query(TourPackageQuery).options(
            selectinload(TourPackageQuery.images),
            selectinload(TourPackageQuery.itineraries).selectinload(Itinerary.activities),
            selectinload(TourPackageQuery.itineraries).selectinload(Itinerary.room_allocations),
            selectinload(TourPackageQuery.itineraries).selectinload(Itinerary.transport_details),
            selectinload(TourPackageQuery.itineraries).selectinload(Itinerary.images),
            selectinload(TourPackageQuery.itineraries).joinedload(Itinerary.hotel),
            selectinload(TourPackageQuery.flight_details),
            selectinload(TourPackageQuery.variant_snapshots),
            joinedload(TourPackageQuery.location),
            joinedload(TourPackageQuery.customer)
        ).filter(TourPackageQuery.id == query_id).first()

    def get_all(self, archived: Optional[bool] = None, customer_name: str = None,
                start_date: date = None, end_date: date = None, assigned_to: str = None,
                search: str = None) -> List[TourPackageQuery]:
        query = self.db.query(TourPackageQuery).options(joinedload(TourPackageQuery.location))
        if archived is not None:
            query = query.filter(TourPackageQuery.is_archived == archived)
        if customer_name:
            query = query.filter(TourPackageQuery.customer_name.ilike(f"%{customer_name}%"))
        if start_date:
            query = query.filter(TourPackageQuery.tour_starts_from >= start_date)
        if end_date:
            query = query.filter(TourPackageQuery.tour_starts_from <= end_date)
        if assigned_to:
            query = query.filter(TourPackageQuery.assigned_to == assigned_to)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                TourPackageQuery.tour_package_query_name.ilike(pattern),
                TourPackageQuery.tour_package_query_number.ilike(pattern),
                TourPackageQuery.customer_name.ilike(pattern)
            ))
        return query.order_by(TourPackageQuery.created_at.desc(), TourPackageQuery.id.desc()).all()

    def get_next_number(self) -> str:
        return next_number(self.db, TourPackageQuery.tour_package_query_number, "TPQ")

    def _validate(self, values: dict):
        ensure_exists(self.db, Location, values.get('location_id'), "Location")
        ensure_exists(self.db, Customer, values.get('customer_id'), "Customer")
        ensure_exists(self.db, TourPackage, values.get('tour_package_id'), "Tour package")
        ensure_exists(self.db, Inquiry, values.get('inquiry_id'), "Inquiry")
        ensure_exists(self.db, MealPlan, values.get('selected_meal_plan_id'), "Meal plan")
        starts, ends = values.get('tour_starts_from'), values.get('tour_ends_on')
        if starts and ends and ends < starts:
            raise ValueError("Tour end date must be on or after the start date")

    def _check_number(self, number: str, query_id: int = None):
        existing = self.db.query(TourPackageQuery.id).filter(
            TourPackageQuery.tour_package_query_number == number
        ).first()
        if existing and existing[0] != query_id:
            raise ValueError(f"Query number {number} is already used")

    def _assign_number(self) -> str:
        number = self.get_next_number()
        self._check_number(number)
        return number

    def create(self, data: TourPackageQueryCreate) -> TourPackageQuery:
        values = data.model_dump(exclude=NESTED_FIELDS, exclude_none=True)
        self._validate(values)
        if values.get('tour_package_query_number'):
            self._check_number(values['tour_package_query_number'])
        else:
            values['tour_package_query_number'] = self._assign_number()

        tour_query = TourPackageQuery(**values)
        tour_query.itineraries = build_itineraries(self.db, data.itineraries)
        tour_query.flight_details = build_flights(data.flight_details)
        tour_query.images = [Image(url=url) for url in data.images]
        self.db.add(tour_query)
        self.db.flush()
        return tour_query

    def update(self, query_id: int, data: TourPackageQueryUpdate) -> Optional[TourPackageQuery]:
        tour_query = self.get_by_id(query_id)
        if not tour_query:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude=NESTED_FIELDS)
        self._validate({
            'tour_starts_from': tour_query.tour_starts_from,
            'tour_ends_on': tour_query.tour_ends_on,
            **update_data
        })
        if update_data.get('tour_package_query_number'):
            self._check_number(update_data['tour_package_query_number'], query_id)
        for key, value in update_data.items():
            if value is None and key in ('location_id', 'tour_package_query_number', 'is_featured', 'is_archived'):
                continue
            setattr(tour_query, key, value)

        if data.itineraries is not None:
            tour_query.itineraries = build_itineraries(self.db, data.itineraries)
        if data.flight_details is not None:
            tour_query.flight_details = build_flights(data.flight_details)
        if data.images is not None:
            tour_query.images = [Image(url=url) for url in data.images]

        self.db.flush()
        return tour_query

    def has_financial_records(self, query_id: int) -> bool:
        for model in (SaleDetail, PurchaseDetail, ReceiptDetail, PaymentDetail, ExpenseDetail, IncomeDetail):
            if self.db.query(model.id).filter(model.tour_package_query_id == query_id).first():
                return True
        return False

    def delete(self, query_id: int) -> bool:
        tour_query = self.get_by_id(query_id)
        if not tour_query:
            return False
        if self.has_financial_records(query_id):
            raise ValueError("Cannot delete a tour package query that has financial records")
        self.db.delete(tour_query)
        self.db.flush()
        return True

    def create_from_tour_package(self, package_id: int, data: QueryFromPackageRequest) -> Optional[TourPackageQuery]:
        """Start a new query from a package template"""
        package = self.db.query(TourPackage).options(
            selectinload(TourPackage.itineraries).selectinload(Itinerary.activities),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.room_allocations),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.transport_details),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.images),
            selectinload(TourPackage.flight_details),
            selectinload(TourPackage.images)
        ).filter(TourPackage.id == package_id).first()
        if not package:
            return None

        self._validate(data.model_dump())
        tour_query = TourPackageQuery(
            tour_package_query_number=self._assign_number(),
            tour_package_query_name=data.tour_package_query_name or package.tour_package_name,
            tour_package_query_type=package.tour_package_type,
            customer_name=data.customer_name,
            customer_number=data.customer_number,
            customer_id=data.customer_id,
            location_id=package.location_id,
            tour_package_id=package.id,
            tour_starts_from=data.tour_starts_from,
            tour_ends_on=data.tour_ends_on,
            selected_variant_ids=data.selected_variant_ids or [],
            **{field: getattr(package, field) for field in PACKAGE_COPY_FIELDS}
        )
        tour_query.itineraries = [copy_itinerary(itinerary) for itinerary in package.itineraries]
        tour_query.flight_details = [copy_flight(flight) for flight in package.flight_details]
        tour_query.images = [Image(url=image.url) for image in package.images]
        self.db.add(tour_query)
        self.db.flush()

        if data.selected_variant_ids:
            self.create_variant_snapshots(tour_query.id, data.selected_variant_ids)
        logger.info(f"Tour package query {tour_query.tour_package_query_number} created from package {package.id}")
        return tour_query

    # ==================== VARIANT SNAPSHOTS ====================

    def get_variant_snapshots(self, query_id: int) -> List[QueryVariantSnapshot]:
        return self.db.query(QueryVariantSnapshot).options(
            selectinload(QueryVariantSnapshot.hotel_snapshots),
            selectinload(QueryVariantSnapshot.pricing_snapshots).selectinload(
                QueryVariantPricingSnapshot.component_snapshots
            )
        ).filter(QueryVariantSnapshot.tour_package_query_id == query_id).order_by(
            QueryVariantSnapshot.sort_order, QueryVariantSnapshot.id
        ).all()

    def delete_variant_snapshots(self, query_id: int) -> int:
        snapshots = self.get_variant_snapshots(query_id)
        for snapshot in snapshots:
            self.db.delete(snapshot)
        self.db.flush()
        return len(snapshots)

    def create_variant_snapshots(self, query_id: int, variant_ids: List[int],
                                 overwrite: bool = True) -> Optional[List[QueryVariantSnapshot]]:
        """Freeze the chosen package variants, their hotels and their pricing onto the query"""
        tour_query = self.db.query(TourPackageQuery).filter(TourPackageQuery.id == query_id).first()
        if not tour_query:
            return None

        variants = self.db.query(PackageVariant).options(
            selectinload(PackageVariant.hotel_mappings).joinedload(VariantHotelMapping.itinerary),
            selectinload(PackageVariant.hotel_mappings).joinedload(VariantHotelMapping.hotel).joinedload(Hotel.location),
            selectinload(PackageVariant.hotel_mappings).joinedload(VariantHotelMapping.hotel).selectinload(Hotel.images),
            selectinload(PackageVariant.pricings).selectinload(TourPackagePricing.components).joinedload(PricingComponent.pricing_attribute),
            selectinload(PackageVariant.pricings).joinedload(TourPackagePricing.meal_plan),
            selectinload(PackageVariant.pricings).joinedload(TourPackagePricing.vehicle_type)
        ).filter(PackageVariant.id.in_(variant_ids)).all()
        found = {variant.id for variant in variants}
        missing = [variant_id for variant_id in variant_ids if variant_id not in found]
        if missing:
            raise ValueError(f"Package variant {missing[0]} not found")

        if overwrite:
            self.delete_variant_snapshots(query_id)
            existing = set()
        else:
            existing = {s.source_variant_id for s in self.get_variant_snapshots(query_id)}

        created = []
        for variant in variants:
            if variant.id in existing:
                continue
            snapshot = QueryVariantSnapshot(
                tour_package_query_id=query_id,
                source_variant_id=variant.id,
                name=variant.name,
                description=variant.description,
                is_default=variant.is_default,
                sort_order=variant.sort_order,
                price_modifier=variant.price_modifier
            )
            snapshot.hotel_snapshots = [
                self._snapshot_hotel(mapping)
                for mapping in sorted(variant.hotel_mappings, key=lambda m: m.itinerary.day_number or 0)
            ]
            snapshot.pricing_snapshots = [self._snapshot_pricing(pricing) for pricing in variant.pricings]
            self.db.add(snapshot)
            created.append(snapshot)

        tour_query.selected_variant_ids = list(variant_ids)
        self.db.flush()
        logger.info(f"Snapshotted {len(created)} variants onto query {query_id}")
        return created

    def _snapshot_hotel(self, mapping: VariantHotelMapping) -> QueryVariantHotelSnapshot:
        hotel = mapping.hotel
        return QueryVariantHotelSnapshot(
            day_number=mapping.itinerary.day_number or 0,
            hotel_id=hotel.id,
            hotel_name=hotel.name,
            location_label=hotel.location.label if hotel.location else None,
            image_url=hotel.images[0].url if hotel.images else None,
            room_category=mapping.itinerary.room_category
        )

    def _snapshot_pricing(self, pricing: TourPackagePricing) -> QueryVariantPricingSnapshot:
        total = sum((to_decimal(c.price) for c in pricing.components), Decimal("0"))
        return QueryVariantPricingSnapshot(
            start_date=pricing.start_date,
            end_date=pricing.end_date,
            meal_plan_id=pricing.meal_plan_id,
            meal_plan_name=pricing.meal_plan.name if pricing.meal_plan else None,
            number_of_rooms=pricing.number_of_rooms,
            is_group_pricing=pricing.is_group_pricing,
            vehicle_type_id=pricing.vehicle_type_id,
            vehicle_type_name=pricing.vehicle_type.name if pricing.vehicle_type else None,
            total_price=total,
            description=pricing.description,
            component_snapshots=[
                QueryVariantPricingComponentSnapshot(
                    pricing_attribute_id=c.pricing_attribute_id,
                    attribute_name=c.pricing_attribute.name if c.pricing_attribute else "Component",
                    price=c.price,
                    purchase_price=c.purchase_price,
                    description=c.description
                )
                for c in pricing.components
            ]
        )

    # ==================== ACCOUNTING ====================

    def replace_accounting(self, query_id: int, data: QueryAccountingUpdate) -> Optional[TourPackageQuery]:
        """
        Replace, per supplied list, every record of that kind on the query.
        Balances are reverted for removed records and posted for new ones.
        """
        tour_query = self.db.query(TourPackageQuery).filter(TourPackageQuery.id == query_id).first()
        if not tour_query:
            return None

        plan = (
            ('purchase_details', PurchaseService(self.db), PurchaseDetail),
            ('sale_details', SalesService(self.db), SaleDetail),
            ('payment_details', PaymentService(self.db), PaymentDetail),
            ('receipt_details', ReceiptService(self.db), ReceiptDetail),
            ('expense_details', ExpenseService(self.db), ExpenseDetail),
            ('income_details', IncomeService(self.db), IncomeDetail),
        )
        for field, service, model in plan:
            records = getattr(data, field)
            if records is None:
                continue
            existing_ids = [row[0] for row in self.db.query(model.id).filter(model.tour_package_query_id == query_id).all()]
            for record_id in existing_ids:
                service.delete(record_id)
            for record in records:
                service.create(record.model_copy(update={'tour_package_query_id': query_id}))
            logger.info(f"Query {query_id}: replaced {len(existing_ids)} {field} with {len(records)}")

        self.db.flush()
        self.db.expire(tour_query)
        return tour_query

    def get_accounts(self, query_id: int) -> Optional[dict]:
        """Every financial record of the query plus the derived summary"""
        tour_query = self.db.query(TourPackageQuery).filter(TourPackageQuery.id == query_id).first()
        if not tour_query:
            return None

        records = {
            'sale_details': SalesService(self.db).get_all(tour_package_query_id=query_id),
            'purchase_details': PurchaseService(self.db).get_all(tour_package_query_id=query_id),
            'sale_returns': self.db.query(SaleReturn).join(SaleDetail).filter(
                SaleDetail.tour_package_query_id == query_id).order_by(SaleReturn.return_date).all(),
            'purchase_returns': self.db.query(PurchaseReturn).join(PurchaseDetail).filter(
                PurchaseDetail.tour_package_query_id == query_id).order_by(PurchaseReturn.return_date).all(),
            'receipt_details': ReceiptService(self.db).get_all(tour_package_query_id=query_id),
            'payment_details': PaymentService(self.db).get_all(tour_package_query_id=query_id),
            'expense_details': ExpenseService(self.db).get_all(tour_package_query_id=query_id),
            'income_details': IncomeService(self.db).get_all(tour_package_query_id=query_id),
        }
        summary = summarize_finances(
            sales=records['sale_details'],
            purchases=records['purchase_details'],
            sale_returns=records['sale_returns'],
            purchase_returns=records['purchase_returns'],
            receipts=records['receipt_details'],
            payments=records['payment_details'],
            expenses=records['expense_details'],
            incomes=records['income_details'],
        )
        return {'tour_package_query': tour_query, 'summary': summary, **records}
