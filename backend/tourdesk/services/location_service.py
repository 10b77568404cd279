"""
Location Service - Locations, Hotels, Hotel and Transport Pricing, Images
"""
from typing import Optional, List
from sqlalchemy.orm import Session, joinedload
from datetime import date

from tourdesk.models import (
    Location, Hotel, HotelPricing, TransportPricing, Image, RoomType, OccupancyType,
    MealPlan, VehicleType, TourPackage, TourPackageQuery, Itinerary, ExpenseDetail
)
from tourdesk.schemas import (
    LocationCreate, LocationUpdate, HotelCreate, HotelUpdate, HotelPricingCreate,
    HotelPricingUpdate, TransportPricingCreate, TransportPricingUpdate
)
from tourdesk.services.common import ensure_exists


def check_window(start_date: date, end_date: date):
    if start_date and end_date and end_date < start_date:
        raise ValueError("End date must be on or after start date")


class LocationService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, location_id: int) -> Optional[Location]:
        return self.db.query(Location).options(joinedload(Location.images)).filter(
            Location.id == location_id
        ).first()

    def get_all(self, search: str = None, include_inactive: bool = False) -> List[Location]:
        query = self.db.query(Location)
        if search:
            query = query.filter(Location.label.ilike(f"%{search}%"))
        if not include_inactive:
            query = query.filter(Location.is_active == True)
        return query.order_by(Location.label).all()

    def create(self, data: LocationCreate) -> Location:
        location = Location(**data.model_dump(exclude={'images'}))
        location.images = [Image(url=url) for url in data.images]
        self.db.add(location)
        self.db.flush()
        return location

    def update(self, location_id: int, data: LocationUpdate) -> Optional[Location]:
        location = self.get_by_id(location_id)
        if not location:
            return None
        for key, value in data.model_dump(exclude_unset=True, exclude={'images'}).items():
            if value is None and key in ('label', 'is_active'):
                continue
            setattr(location, key, value)
        if data.images is not None:
            location.images = [Image(url=url) for url in data.images]
        self.db.flush()
        return location

    def delete(self, location_id: int) -> bool:
        location = self.get_by_id(location_id)
        if not location:
            return False
        in_use = (
            self.db.query(Hotel.id).filter(Hotel.location_id == location_id).first()
            or self.db.query(TourPackage.id).filter(TourPackage.location_id == location_id).first()
            or self.db.query(TourPackageQuery.id).filter(TourPackageQuery.location_id == location_id).first()
            or self.db.query(Itinerary.id).filter(Itinerary.location_id == location_id).first()
        )
        if in_use:
            raise ValueError("Location is used by hotels, packages or queries and cannot be deleted")
        self.db.delete(location)
        self.db.flush()
        return True


class HotelService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, hotel_id: int) -> Optional[Hotel]:
        return self.db.query(Hotel).options(
            joinedload(Hotel.images),
            joinedload(Hotel.location)
        ).filter(Hotel.id == hotel_id).first()

    def get_all(self, location_id: int = None, search: str = None,
                include_inactive: bool = False) -> List[Hotel]:
        query = self.db.query(Hotel).options(joinedload(Hotel.location))
        if location_id:
            query = query.filter(Hotel.location_id == location_id)
        if search:
            query = query.filter(Hotel.name.ilike(f"%{search}%"))
        if not include_inactive:
            query = query.filter(Hotel.is_active == True)
        return query.order_by(Hotel.name).all()

    def create(self, data: HotelCreate) -> Hotel:
        ensure_exists(self.db, Location, data.location_id, "Location")
        hotel = Hotel(**data.model_dump(exclude={'images'}))
        hotel.images = [Image(url=url) for url in data.images]
        self.db.add(hotel)
        self.db.flush()
        return hotel

    def update(self, hotel_id: int, data: HotelUpdate) -> Optional[Hotel]:
        hotel = self.get_by_id(hotel_id)
        if not hotel:
            return None
        update_data = data.model_dump(exclude_unset=True, exclude={'images'})
        if update_data.get('location_id'):
            ensure_exists(self.db, Location, update_data['location_id'], "Location")
        for key, value in update_data.items():
            if value is None and key in ('name', 'location_id', 'is_active'):
                continue
            setattr(hotel, key, value)
        if data.images is not None:
            hotel.images = [Image(url=url) for url in data.images]
        self.db.flush()
        return hotel

    def delete(self, hotel_id: int) -> bool:
        hotel = self.get_by_id(hotel_id)
        if not hotel:
            return False
        if self.db.query(Itinerary.id).filter(Itinerary.hotel_id == hotel_id).first():
            raise ValueError("Hotel is used in itineraries and cannot be deleted")
        self.db.delete(hotel)
        self.db.flush()
        return True

    # ==================== HOTEL PRICING ====================

    def get_pricings(self, hotel_id: int, active_only: bool = False) -> List[HotelPricing]:
        query = self.db.query(HotelPricing).options(
            joinedload(HotelPricing.room_type),
            joinedload(HotelPricing.occupancy_type),
            joinedload(HotelPricing.meal_plan)
        ).filter(HotelPricing.hotel_id == hotel_id)
        if active_only:
            query = query.filter(HotelPricing.is_active == True)
        return query.order_by(HotelPricing.start_date).all()

    def get_pricing(self, hotel_id: int, pricing_id: int) -> Optional[HotelPricing]:
        return self.db.query(HotelPricing).filter(
            HotelPricing.id == pricing_id,
            HotelPricing.hotel_id == hotel_id
        ).first()

    def _validate_pricing(self, values: dict):
        check_window(values.get('start_date'), values.get('end_date'))
        ensure_exists(self.db, RoomType, values.get('room_type_id'), "Room type")
        ensure_exists(self.db, OccupancyType, values.get('occupancy_type_id'), "Occupancy type")
        ensure_exists(self.db, MealPlan, values.get('meal_plan_id'), "Meal plan")

    def create_pricing(self, hotel_id: int, data: HotelPricingCreate) -> HotelPricing:
        values = data.model_dump()
        self._validate_pricing(values)
        pricing = HotelPricing(hotel_id=hotel_id, **values)
        self.db.add(pricing)
        self.db.flush()
        return pricing

    def update_pricing(self, hotel_id: int, pricing_id: int, data: HotelPricingUpdate) -> Optional[HotelPricing]:
        pricing = self.get_pricing(hotel_id, pricing_id)
        if not pricing:
            return None
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items()
                       if v is not None or k == 'meal_plan_id'}
        merged = {
            'start_date': pricing.start_date,
            'end_date': pricing.end_date,
            **update_data
        }
        self._validate_pricing(merged)
        for key, value in update_data.items():
            setattr(pricing, key, value)
        self.db.flush()
        return pricing

    def delete_pricing(self, hotel_id: int, pricing_id: int) -> bool:
        pricing = self.get_pricing(hotel_id, pricing_id)
        if not pricing:
            return False
        self.db.delete(pricing)
        self.db.flush()
        return True


class TransportPricingService:
    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, pricing_id: int) -> Optional[TransportPricing]:
        return self.db.query(TransportPricing).filter(TransportPricing.id == pricing_id).first()

    def get_all(self, location_id: int = None, vehicle_type_id: int = None,
                active_only: bool = False) -> List[TransportPricing]:
        query = self.db.query(TransportPricing).options(
            joinedload(TransportPricing.location),
            joinedload(TransportPricing.vehicle_type)
        )
        if location_id:
            query = query.filter(TransportPricing.location_id == location_id)
        if vehicle_type_id:
            query = query.filter(TransportPricing.vehicle_type_id == vehicle_type_id)
        if active_only:
            query = query.filter(TransportPricing.is_active == True)
        return query.order_by(TransportPricing.start_date).all()

    def _validate(self, values: dict):
        check_window(values.get('start_date'), values.get('end_date'))
        ensure_exists(self.db, Location, values.get('location_id'), "Location")
        ensure_exists(self.db, VehicleType, values.get('vehicle_type_id'), "Vehicle type")

    def create(self, data: TransportPricingCreate) -> TransportPricing:
        values = data.model_dump()
        self._validate(values)
        values['transport_type'] = data.transport_type.value
        pricing = TransportPricing(**values)
        self.db.add(pricing)
        self.db.flush()
        return pricing

    def update(self, pricing_id: int, data: TransportPricingUpdate) -> Optional[TransportPricing]:
        pricing = self.get_by_id(pricing_id)
        if not pricing:
            return None
        update_data = {k: v for k, v in data.model_dump(exclude_unset=True).items()
                       if v is not None or k == 'description'}
        self._validate({'start_date': pricing.start_date, 'end_date': pricing.end_date, **update_data})
        if 'transport_type' in update_data:
            update_data['transport_type'] = data.transport_type.value
        for key, value in update_data.items():
            setattr(pricing, key, value)
        self.db.flush()
        return pricing

    def delete(self, pricing_id: int) -> bool:
        pricing = self.get_by_id(pricing_id)
        if not pricing:
            return False
        self.db.delete(pricing)
        self.db.flush()
        return True


# URL segment -> (owner model, image foreign key)
IMAGE_OWNERS = {
    "locations": (Location, "location_id"),
    "hotels": (Hotel, "hotel_id"),
    "tour-packages": (TourPackage, "tour_package_id"),
    "tour-package-queries": (TourPackageQuery, "tour_package_query_id"),
    "expenses": (ExpenseDetail, "expense_id"),
}


class ImageService:
    """Image URLs returned by the media upload widget, attached to an owner"""

    def __init__(self, db: Session, owner_kind: str):
        self.db = db
        self.owner_model, self.foreign_key = IMAGE_OWNERS[owner_kind]

    def add(self, owner_id: int, url: str) -> Optional[Image]:
        owner = self.db.query(self.owner_model).filter(self.owner_model.id == owner_id).first()
        if not owner:
            return None
        image = Image(url=url, **{self.foreign_key: owner_id})
        self.db.add(image)
        self.db.flush()
        return image

    def delete(self, owner_id: int, image_id: int) -> bool:
        image = self.db.query(Image).filter(
            Image.id == image_id,
            getattr(Image, self.foreign_key) == owner_id
        ).first()
        if not image:
            return False
        self.db.delete(image)
        self.db.flush()
        return True
