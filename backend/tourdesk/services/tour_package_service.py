"""
Tour Package Service - package templates, itineraries, pricing periods and variants
"""
from typing import Optional, List, Dict
from sqlalchemy.orm import Session, joinedload, selectinload
import logging

from tourdesk.models import (
    TourPackage, Itinerary, Activity, RoomAllocation, TransportDetail, FlightDetail,
    Image, Location, Hotel, MealPlan, VehicleType, PricingAttribute,
    TourPackagePricing, PricingComponent, PackageVariant, VariantHotelMapping,
    RoomType, OccupancyType, TourPackageQuery, QueryVariantSnapshot
)
from tourdesk.schemas import (
    TourPackageCreate, TourPackageUpdate, ItineraryInput, FlightDetailInput,
    TourPackagePricingCreate, TourPackagePricingUpdate, PackageVariantCreate,
    PackageVariantUpdate, PricingComponentInput, VariantHotelMappingInput
)
from tourdesk.services.common import ensure_exists
from tourdesk.services.location_service import check_window

logger = logging.getLogger(__name__)

PACKAGE_COPY_FIELDS = (
    "tour_category", "num_days_night", "period", "transport", "pickup_location",
    "drop_location", "tour_highlights", "num_adults", "num_child_5_to_12",
    "num_child_0_to_5", "price", "price_per_adult", "price_per_child_or_extra_bed",
    "price_per_child_5_to_12_no_bed", "price_per_child_with_seat_below_5",
    "total_price", "pricing_section", "inclusions", "exclusions", "important_notes",
    "payment_policy", "useful_tip", "cancellation_policy", "airline_cancellation_policy",
    "terms_conditions", "kitchen_group_policy",
)

FLIGHT_FIELDS = (
    "date", "flight_name", "flight_number", "from_location", "to_location",
    "departure_time", "arrival_time", "flight_duration",
)


# ==================== ITINERARY BUILDERS ====================

def build_itinerary(db: Session, data: ItineraryInput, position: int) -> Itinerary:
    ensure_exists(db, Location, data.location_id, "Location")
    ensure_exists(db, Hotel, data.hotel_id, "Hotel")

    itinerary = Itinerary(
        day_number=data.day_number if data.day_number is not None else position + 1,
        days=data.days,
        itinerary_title=data.itinerary_title,
        itinerary_description=data.itinerary_description,
        location_id=data.location_id,
        hotel_id=data.hotel_id,
        number_of_rooms=data.number_of_rooms,
        room_category=data.room_category,
        meals_included=data.meals_included,
    )
    itinerary.images = [Image(url=url) for url in data.images]
    itinerary.activities = [
        Activity(
            activity_title=activity.activity_title,
            activity_description=activity.activity_description,
            location_id=activity.location_id or data.location_id,
            images=[Image(url=url) for url in activity.images]
        )
        for activity in data.activities
    ]
    for allocation in data.room_allocations:
        ensure_exists(db, RoomType, allocation.room_type_id, "Room type")
        ensure_exists(db, OccupancyType, allocation.occupancy_type_id, "Occupancy type")
        ensure_exists(db, MealPlan, allocation.meal_plan_id, "Meal plan")
    itinerary.room_allocations = [
        RoomAllocation(**allocation.model_dump()) for allocation in data.room_allocations
    ]
    for transport in data.transport_details:
        ensure_exists(db, VehicleType, transport.vehicle_type_id, "Vehicle type")
    itinerary.transport_details = [
        TransportDetail(**transport.model_dump()) for transport in data.transport_details
    ]
    return itinerary


def build_itineraries(db: Session, items: List[ItineraryInput]) -> List[Itinerary]:
    return [build_itinerary(db, item, position) for position, item in enumerate(items)]


def build_flights(items: List[FlightDetailInput]) -> List[FlightDetail]:
    return [FlightDetail(**item.model_dump()) for item in items]


def copy_itinerary(source: Itinerary) -> Itinerary:
    """Deep copy of an itinerary with its images, activities, rooms and transport"""
    return Itinerary(
        day_number=source.day_number,
        days=source.days,
        itinerary_title=source.itinerary_title,
        itinerary_description=source.itinerary_description,
        location_id=source.location_id,
        hotel_id=source.hotel_id,
        number_of_rooms=source.number_of_rooms,
        room_category=source.room_category,
        meals_included=source.meals_included,
        images=[Image(url=image.url) for image in source.images],
        activities=[
            Activity(
                activity_title=activity.activity_title,
                activity_description=activity.activity_description,
                location_id=activity.location_id,
                images=[Image(url=image.url) for image in activity.images]
            )
            for activity in source.activities
        ],
        room_allocations=[
            RoomAllocation(
                room_type_id=allocation.room_type_id,
                occupancy_type_id=allocation.occupancy_type_id,
                meal_plan_id=allocation.meal_plan_id,
                quantity=allocation.quantity,
                guest_names=allocation.guest_names,
                voucher_number=allocation.voucher_number
            )
            for allocation in source.room_allocations
        ],
        transport_details=[
            TransportDetail(
                vehicle_type_id=transport.vehicle_type_id,
                quantity=transport.quantity,
                description=transport.description
            )
            for transport in source.transport_details
        ],
    )


def copy_flight(source: FlightDetail) -> FlightDetail:
    return FlightDetail(**{field: getattr(source, field) for field in FLIGHT_FIELDS})


class TourPackageService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== PACKAGES ====================

    def get_by_id(self, package_id: int) -> Optional[TourPackage]:
        return self.db.query(TourPackage).options(
            selectinload(TourPackage.images),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.activities),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.room_allocations),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.transport_details),
            selectinload(TourPackage.itineraries).selectinload(Itinerary.images),
            selectinload(TourPackage.flight_details),
            selectinload(TourPackage.variants).selectinload(PackageVariant.hotel_mappings),
            selectinload(TourPackage.pricings).selectinload(TourPackagePricing.components),
            joinedload(TourPackage.location)
        ).filter(TourPackage.id == package_id).first()

    def get_all(self, location_id: int = None, tour_package_type: str = None,
                tour_category: str = None, archived: Optional[bool] = None,
                search: str = None) -> List[TourPackage]:
        query = self.db.query(TourPackage).options(
            joinedload(TourPackage.location),
            selectinload(TourPackage.images)
        )
        if location_id:
            query = query.filter(TourPackage.location_id == location_id)
        if tour_package_type:
            query = query.filter(TourPackage.tour_package_type == tour_package_type)
        if tour_category:
            query = query.filter(TourPackage.tour_category == tour_category)
        if archived is not None:
            query = query.filter(TourPackage.is_archived == archived)
        if search:
            query = query.filter(TourPackage.tour_package_name.ilike(f"%{search}%"))
        return query.order_by(TourPackage.website_sort_order, TourPackage.created_at.desc()).all()

    def create(self, data: TourPackageCreate) -> TourPackage:
        ensure_exists(self.db, Location, data.location_id, "Location")

        values = data.model_dump(exclude={'itineraries', 'flight_details', 'images'}, exclude_none=True)
        package = TourPackage(**values)
        package.itineraries = build_itineraries(self.db, data.itineraries)
        package.flight_details = build_flights(data.flight_details)
        package.images = [Image(url=url) for url in data.images]
        self.db.add(package)
        self.db.flush()
        return package

    def update(self, package_id: int, data: TourPackageUpdate) -> Optional[TourPackage]:
        package = self.get_by_id(package_id)
        if not package:
            return None

        update_data = data.model_dump(exclude_unset=True, exclude={'itineraries', 'flight_details', 'images'})
        if update_data.get('location_id'):
            ensure_exists(self.db, Location, update_data['location_id'], "Location")
        for key, value in update_data.items():
            if value is None and key in ('location_id', 'is_featured', 'is_archived'):
                continue
            setattr(package, key, value)

        if data.itineraries is not None:
            # Variant hotel mappings point at the itineraries being replaced
            for variant in package.variants:
                variant.hotel_mappings = []
            self.db.flush()
            package.itineraries = build_itineraries(self.db, data.itineraries)
        if data.flight_details is not None:
            package.flight_details = build_flights(data.flight_details)
        if data.images is not None:
            package.images = [Image(url=url) for url in data.images]

        self.db.flush()
        return package

    def delete(self, package_id: int) -> bool:
        package = self.get_by_id(package_id)
        if not package:
            return False
        # Queries keep their copied content; only the link to the template goes
        self.db.query(TourPackageQuery).filter(
            TourPackageQuery.tour_package_id == package_id
        ).update({TourPackageQuery.tour_package_id: None}, synchronize_session=False)
        variant_ids = [variant.id for variant in package.variants]
        if variant_ids:
            self.db.query(QueryVariantSnapshot).filter(
                QueryVariantSnapshot.source_variant_id.in_(variant_ids)
            ).update({QueryVariantSnapshot.source_variant_id: None}, synchronize_session=False)
        self.db.delete(package)
        self.db.flush()
        return True

    def duplicate(self, package_id: int) -> Optional[TourPackage]:
        """Copy a package with its itineraries, flights, images, variants and pricing"""
        source = self.get_by_id(package_id)
        if not source:
            return None

        copy = TourPackage(
            tour_package_name=f"Copy of {source.tour_package_name or 'Tour Package'}",
            tour_package_type=source.tour_package_type,
            location_id=source.location_id,
            website_sort_order=source.website_sort_order,
            is_featured=False,
            is_archived=source.is_archived,
            **{field: getattr(source, field) for field in PACKAGE_COPY_FIELDS}
        )
        itinerary_map: Dict[int, Itinerary] = {}
        for itinerary in source.itineraries:
            clone = copy_itinerary(itinerary)
            itinerary_map[itinerary.id] = clone
            copy.itineraries.append(clone)
        copy.flight_details = [copy_flight(flight) for flight in source.flight_details]
        copy.images = [Image(url=image.url) for image in source.images]
        self.db.add(copy)
        self.db.flush()

        variant_map: Dict[int, PackageVariant] = {}
        for variant in source.variants:
            clone = PackageVariant(
                name=variant.name,
                description=variant.description,
                is_default=variant.is_default,
                sort_order=variant.sort_order,
                price_modifier=variant.price_modifier,
                hotel_mappings=[
                    VariantHotelMapping(itinerary_id=itinerary_map[m.itinerary_id].id, hotel_id=m.hotel_id)
                    for m in variant.hotel_mappings if m.itinerary_id in itinerary_map
                ]
            )
            variant_map[variant.id] = clone
            copy.variants.append(clone)
        self.db.flush()

        for pricing in source.pricings:
            copy.pricings.append(TourPackagePricing(
                package_variant_id=variant_map[pricing.package_variant_id].id if pricing.package_variant_id in variant_map else None,
                start_date=pricing.start_date,
                end_date=pricing.end_date,
                meal_plan_id=pricing.meal_plan_id,
                number_of_rooms=pricing.number_of_rooms,
                vehicle_type_id=pricing.vehicle_type_id,
                is_group_pricing=pricing.is_group_pricing,
                description=pricing.description,
                is_active=pricing.is_active,
                components=[
                    PricingComponent(
                        pricing_attribute_id=c.pricing_attribute_id,
                        price=c.price,
                        purchase_price=c.purchase_price,
                        description=c.description
                    )
                    for c in pricing.components
                ]
            ))
        self.db.flush()
        logger.info(f"Tour package {source.id} duplicated as {copy.id}")
        return copy

    # ==================== PRICING PERIODS ====================

    def get_pricings(self, package_id: int, package_variant_id: int = None,
                     active_only: bool = False) -> List[TourPackagePricing]:
        query = self.db.query(TourPackagePricing).options(
            selectinload(TourPackagePricing.components).joinedload(PricingComponent.pricing_attribute),
            joinedload(TourPackagePricing.meal_plan),
            joinedload(TourPackagePricing.vehicle_type)
        ).filter(TourPackagePricing.tour_package_id == package_id)
        if package_variant_id:
            query = query.filter(TourPackagePricing.package_variant_id == package_variant_id)
        if active_only:
            query = query.filter(TourPackagePricing.is_active == True)
        return query.order_by(TourPackagePricing.start_date).all()

    def get_pricing(self, package_id: int, pricing_id: int) -> Optional[TourPackagePricing]:
        return self.db.query(TourPackagePricing).filter(
            TourPackagePricing.id == pricing_id,
            TourPackagePricing.tour_package_id == package_id
        ).first()

    def _validate_pricing(self, package_id: int, values: dict):
        check_window(values.get('start_date'), values.get('end_date'))
        ensure_exists(self.db, MealPlan, values.get('meal_plan_id'), "Meal plan")
        ensure_exists(self.db, VehicleType, values.get('vehicle_type_id'), "Vehicle type")
        variant_id = values.get('package_variant_id')
        if variant_id and not self.get_variant(package_id, variant_id):
            raise ValueError(f"Package variant {variant_id} not found")

    def _build_components(self, components: List[PricingComponentInput]) -> List[PricingComponent]:
        rows = []
        for component in components:
            ensure_exists(self.db, PricingAttribute, component.pricing_attribute_id, "Pricing attribute")
            rows.append(PricingComponent(**component.model_dump()))
        return rows

    def create_pricing(self, package_id: int, data: TourPackagePricingCreate) -> Optional[TourPackagePricing]:
        if not self.db.query(TourPackage.id).filter(TourPackage.id == package_id).first():
            return None
        values = data.model_dump(exclude={'components'})
        self._validate_pricing(package_id, values)

        pricing = TourPackagePricing(tour_package_id=package_id, **values)
        pricing.components = self._build_components(data.components)
        self.db.add(pricing)
        self.db.flush()
        return pricing

    def update_pricing(self, package_id: int, pricing_id: int,
                       data: TourPackagePricingUpdate) -> Optional[TourPackagePricing]:
        pricing = self.get_pricing(package_id, pricing_id)
        if not pricing:
            return None

        update_data = {
            k: v for k, v in data.model_dump(exclude_unset=True, exclude={'components'}).items()
            if v is not None or k in ('package_variant_id', 'vehicle_type_id', 'description')
        }
        merged = {
            'start_date': pricing.start_date,
            'end_date': pricing.end_date,
            **update_data
        }
        self._validate_pricing(package_id, merged)
        for key, value in update_data.items():
            setattr(pricing, key, value)
        if data.components is not None:
            pricing.components = self._build_components(data.components)
        self.db.flush()
        return pricing

    def delete_pricing(self, package_id: int, pricing_id: int) -> bool:
        pricing = self.get_pricing(package_id, pricing_id)
        if not pricing:
            return False
        self.db.delete(pricing)
        self.db.flush()
        return True

    # ==================== VARIANTS ====================

    def get_variants(self, package_id: int) -> List[PackageVariant]:
        return self.db.query(PackageVariant).options(
            selectinload(PackageVariant.hotel_mappings).joinedload(VariantHotelMapping.hotel)
        ).filter(PackageVariant.tour_package_id == package_id).order_by(
            PackageVariant.sort_order, PackageVariant.id
        ).all()

    def get_variant(self, package_id: int, variant_id: int) -> Optional[PackageVariant]:
        return self.db.query(PackageVariant).filter(
            PackageVariant.id == variant_id,
            PackageVariant.tour_package_id == package_id
        ).first()

    def _build_mappings(self, package_id: int, mappings: List[VariantHotelMappingInput]) -> List[VariantHotelMapping]:
        rows = []
        seen = set()
        for mapping in mappings:
            itinerary = self.db.query(Itinerary).filter(
                Itinerary.id == mapping.itinerary_id,
                Itinerary.tour_package_id == package_id
            ).first()
            if not itinerary:
                raise ValueError(f"Itinerary {mapping.itinerary_id} does not belong to this package")
            if mapping.itinerary_id in seen:
                raise ValueError(f"Itinerary {mapping.itinerary_id} is mapped twice")
            seen.add(mapping.itinerary_id)
            ensure_exists(self.db, Hotel, mapping.hotel_id, "Hotel")
            rows.append(VariantHotelMapping(itinerary_id=mapping.itinerary_id, hotel_id=mapping.hotel_id))
        return rows

    def _keep_single_default(self, package_id: int, preferred: Optional[PackageVariant] = None):
        """Exactly one variant of a package is the default"""
        variants = self.get_variants(package_id)
        if not variants:
            return
        if preferred is not None and preferred.is_default:
            default = preferred
        else:
            defaults = [v for v in variants if v.is_default]
            default = defaults[0] if defaults else variants[0]
        for variant in variants:
            variant.is_default = variant.id == default.id
        self.db.flush()

    def create_variant(self, package_id: int, data: PackageVariantCreate) -> Optional[PackageVariant]:
        if not self.db.query(TourPackage.id).filter(TourPackage.id == package_id).first():
            return None
        variant = PackageVariant(
            tour_package_id=package_id,
            **data.model_dump(exclude={'hotel_mappings'})
        )
        variant.hotel_mappings = self._build_mappings(package_id, data.hotel_mappings)
        self.db.add(variant)
        self.db.flush()
        self._keep_single_default(package_id, variant)
        return variant

    def update_variant(self, package_id: int, variant_id: int,
                       data: PackageVariantUpdate) -> Optional[PackageVariant]:
        variant = self.get_variant(package_id, variant_id)
        if not variant:
            return None
        update_data = data.model_dump(exclude_unset=True, exclude={'hotel_mappings'})
        for key, value in update_data.items():
            if value is None and key in ('name', 'is_default', 'sort_order'):
                continue
            setattr(variant, key, value)
        if data.hotel_mappings is not None:
            variant.hotel_mappings = self._build_mappings(package_id, data.hotel_mappings)
        self.db.flush()
        self._keep_single_default(package_id, variant)
        return variant

    def delete_variant(self, package_id: int, variant_id: int) -> bool:
        variant = self.get_variant(package_id, variant_id)
        if not variant:
            return False
        # Pricing periods of a variant go with it
        for pricing in list(variant.pricings):
            self.db.delete(pricing)
        self.db.flush()
        self.db.query(QueryVariantSnapshot).filter(
            QueryVariantSnapshot.source_variant_id == variant_id
        ).update({QueryVariantSnapshot.source_variant_id: None}, synchronize_session=False)
        self.db.delete(variant)
        self.db.flush()
        self._keep_single_default(package_id)
        return True
