"""
SQLAlchemy Models for the Tour Desk back office
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Date, Numeric,
    ForeignKey, JSON, UniqueConstraint
)
from sqlalchemy.orm import relationship
import enum

from tourdesk.core.database import Base


# ==================== ENUMS ====================

class UserRole(enum.Enum):
    ADMIN = "admin"
    ACCOUNTS = "accounts"
    OPERATIONS = "operations"
    ASSOCIATE = "associate"


class TransportPricingType(enum.Enum):
    PER_DAY = "PerDay"
    PER_TRIP = "PerTrip"


class TransactionStatus(enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InquiryStatus(enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class TdsStatus(enum.Enum):
    PENDING = "pending"
    DEPOSITED = "deposited"


# ==================== USERS & AUDIT ====================

class User(Base):
    """Back office staff account"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True)
    username = Column(String(100), nullable=False, unique=True)
    email = Column(String(255), nullable=False, unique=True)
    hashed_password = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=True)
    role = Column(String(20), default=UserRole.OPERATIONS.value, nullable=False)
    is_active = Column(Boolean, default=True)
    last_login = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value


class AuditLog(Base):
    """Audit trail of sensitive operations"""
    __tablename__ = 'audit_logs'

    id = Column(Integer, primary_key=True)
    action = Column(String(50), nullable=False, index=True)
    resource_type = Column(String(100), nullable=False, index=True)
    resource_id = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    old_values = Column(Text, nullable=True)
    new_values = Column(Text, nullable=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    username = Column(String(100), nullable=True)
    ip_address = Column(String(50), nullable=True)
    user_agent = Column(String(500), nullable=True)
    request_method = Column(String(10), nullable=True)
    request_path = Column(String(500), nullable=True)
    status = Column(String(20), default="success")
    error_message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)

    user = relationship("User")


# ==================== IMAGES ====================

class Image(Base):
    """Uploaded image URL attached to one owning record"""
    __tablename__ = 'images'

    id = Column(Integer, primary_key=True)
    url = Column(String(1000), nullable=False)
    location_id = Column(Integer, ForeignKey('locations.id', ondelete='CASCADE'), nullable=True)
    hotel_id = Column(Integer, ForeignKey('hotels.id', ondelete='CASCADE'), nullable=True)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='CASCADE'), nullable=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id', ondelete='CASCADE'), nullable=True)
    itinerary_id = Column(Integer, ForeignKey('itineraries.id', ondelete='CASCADE'), nullable=True)
    activity_id = Column(Integer, ForeignKey('activities.id', ondelete='CASCADE'), nullable=True)
    expense_id = Column(Integer, ForeignKey('expense_details.id', ondelete='CASCADE'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)


# ==================== LOCATIONS & HOTELS ====================

class Location(Base):
    """Destination"""
    __tablename__ = 'locations'

    id = Column(Integer, primary_key=True)
    label = Column(String(255), nullable=False)
    tags = Column(String(500), nullable=True)
    slug = Column(String(255), nullable=True, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")
    hotels = relationship("Hotel", back_populates="location")


class Hotel(Base):
    __tablename__ = 'hotels'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=False)
    link = Column(String(1000), nullable=True)
    destination = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    location = relationship("Location", back_populates="hotels")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")
    pricings = relationship("HotelPricing", back_populates="hotel", cascade="all, delete-orphan")


# ==================== LOOKUPS ====================

class RoomType(Base):
    __tablename__ = 'room_types'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class OccupancyType(Base):
    __tablename__ = 'occupancy_types'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    max_persons = Column(Integer, default=1)
    rank = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class MealPlan(Base):
    __tablename__ = 'meal_plans'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    code = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class VehicleType(Base):
    __tablename__ = 'vehicle_types'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class PricingAttribute(Base):
    """Named pricing component, e.g. "Per Person Cost (Double Occupancy)" """
    __tablename__ = 'pricing_attributes'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    sort_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class TaxSlab(Base):
    __tablename__ = 'tax_slabs'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    percentage = Column(Numeric(5, 2), nullable=False, default=Decimal("0.00"))
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class UnitOfMeasure(Base):
    __tablename__ = 'units_of_measure'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    abbreviation = Column(String(20), nullable=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class ExpenseCategory(Base):
    __tablename__ = 'expense_categories'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


class IncomeCategory(Base):
    __tablename__ = 'income_categories'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)


# ==================== PARTIES ====================

class Customer(Base):
    __tablename__ = 'customers'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    contact = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    gstin = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    sale_details = relationship("SaleDetail", back_populates="customer")
    receipt_details = relationship("ReceiptDetail", back_populates="customer")


class Supplier(Base):
    __tablename__ = 'suppliers'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    contact = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    gstin = Column(String(20), nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    purchase_details = relationship("PurchaseDetail", back_populates="supplier")
    payment_details = relationship("PaymentDetail", back_populates="supplier")


# ==================== BANK & CASH ====================

class BankAccount(Base):
    __tablename__ = 'bank_accounts'

    id = Column(Integer, primary_key=True)
    account_name = Column(String(255), nullable=False)
    bank_name = Column(String(255), nullable=True)
    account_number = Column(String(50), nullable=True)
    ifsc_code = Column(String(20), nullable=True)
    branch = Column(String(255), nullable=True)
    opening_balance = Column(Numeric(14, 2), default=Decimal("0.00"))
    current_balance = Column(Numeric(14, 2), default=Decimal("0.00"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class CashAccount(Base):
    __tablename__ = 'cash_accounts'

    id = Column(Integer, primary_key=True)
    account_name = Column(String(255), nullable=False)
    opening_balance = Column(Numeric(14, 2), default=Decimal("0.00"))
    current_balance = Column(Numeric(14, 2), default=Decimal("0.00"))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


# ==================== SUPPLIER RATE CARDS ====================

class HotelPricing(Base):
    """Room rate for a hotel over a date window"""
    __tablename__ = 'hotel_pricings'

    id = Column(Integer, primary_key=True)
    hotel_id = Column(Integer, ForeignKey('hotels.id', ondelete='CASCADE'), nullable=False)
    room_type_id = Column(Integer, ForeignKey('room_types.id'), nullable=False)
    occupancy_type_id = Column(Integer, ForeignKey('occupancy_types.id'), nullable=False)
    meal_plan_id = Column(Integer, ForeignKey('meal_plans.id'), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    hotel = relationship("Hotel", back_populates="pricings")
    room_type = relationship("RoomType")
    occupancy_type = relationship("OccupancyType")
    meal_plan = relationship("MealPlan")


class TransportPricing(Base):
    """Vehicle rate at a location over a date window"""
    __tablename__ = 'transport_pricings'

    id = Column(Integer, primary_key=True)
    location_id = Column(Integer, ForeignKey('locations.id', ondelete='CASCADE'), nullable=False)
    vehicle_type_id = Column(Integer, ForeignKey('vehicle_types.id'), nullable=False)
    transport_type = Column(String(20), default=TransportPricingType.PER_DAY.value)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    location = relationship("Location")
    vehicle_type = relationship("VehicleType")


# ==================== TOUR PACKAGES ====================

class TourPackage(Base):
    """Reusable tour package template"""
    __tablename__ = 'tour_packages'

    id = Column(Integer, primary_key=True)
    tour_package_name = Column(String(255), nullable=True)
    tour_package_type = Column(String(100), nullable=True)
    tour_category = Column(String(100), nullable=True)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=False)
    num_days_night = Column(String(50), nullable=True)
    period = Column(String(100), nullable=True)
    transport = Column(String(255), nullable=True)
    pickup_location = Column(String(255), nullable=True)
    drop_location = Column(String(255), nullable=True)
    tour_highlights = Column(Text, nullable=True)
    num_adults = Column(String(20), nullable=True)
    num_child_5_to_12 = Column(String(20), nullable=True)
    num_child_0_to_5 = Column(String(20), nullable=True)
    price = Column(String(100), nullable=True)
    price_per_adult = Column(String(100), nullable=True)
    price_per_child_or_extra_bed = Column(String(100), nullable=True)
    price_per_child_5_to_12_no_bed = Column(String(100), nullable=True)
    price_per_child_with_seat_below_5 = Column(String(100), nullable=True)
    total_price = Column(String(100), nullable=True)
    pricing_section = Column(JSON, default=list)
    inclusions = Column(JSON, default=list)
    exclusions = Column(JSON, default=list)
    important_notes = Column(JSON, default=list)
    payment_policy = Column(JSON, default=list)
    useful_tip = Column(JSON, default=list)
    cancellation_policy = Column(JSON, default=list)
    airline_cancellation_policy = Column(JSON, default=list)
    terms_conditions = Column(JSON, default=list)
    kitchen_group_policy = Column(JSON, default=list)
    slug = Column(String(255), nullable=True, unique=True)
    website_sort_order = Column(Integer, default=0)
    is_featured = Column(Boolean, default=False)
    is_archived = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    location = relationship("Location")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")
    itineraries = relationship(
        "Itinerary", back_populates="tour_package",
        cascade="all, delete-orphan", order_by="Itinerary.day_number"
    )
    flight_details = relationship(
        "FlightDetail", back_populates="tour_package",
        cascade="all, delete-orphan", order_by="FlightDetail.id"
    )
    pricings = relationship(
        "TourPackagePricing", back_populates="tour_package",
        cascade="all, delete-orphan", order_by="TourPackagePricing.start_date"
    )
    variants = relationship(
        "PackageVariant", back_populates="tour_package",
        cascade="all, delete-orphan", order_by="PackageVariant.sort_order"
    )


class Itinerary(Base):
    """One day of a tour package or a tour package query"""
    __tablename__ = 'itineraries'

    id = Column(Integer, primary_key=True)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='CASCADE'), nullable=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id', ondelete='CASCADE'), nullable=True)
    day_number = Column(Integer, nullable=True)
    days = Column(String(100), nullable=True)
    itinerary_title = Column(Text, nullable=True)
    itinerary_description = Column(Text, nullable=True)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=False)
    hotel_id = Column(Integer, ForeignKey('hotels.id'), nullable=True)
    number_of_rooms = Column(String(50), nullable=True)
    room_category = Column(String(100), nullable=True)
    meals_included = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    tour_package = relationship("TourPackage", back_populates="itineraries")
    tour_package_query = relationship("TourPackageQuery", back_populates="itineraries")
    location = relationship("Location")
    hotel = relationship("Hotel")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")
    activities = relationship("Activity", back_populates="itinerary", cascade="all, delete-orphan", order_by="Activity.id")
    room_allocations = relationship("RoomAllocation", back_populates="itinerary", cascade="all, delete-orphan")
    transport_details = relationship("TransportDetail", back_populates="itinerary", cascade="all, delete-orphan")


class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True)
    itinerary_id = Column(Integer, ForeignKey('itineraries.id', ondelete='CASCADE'), nullable=False)
    activity_title = Column(Text, nullable=True)
    activity_description = Column(Text, nullable=True)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    itinerary = relationship("Itinerary", back_populates="activities")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")


class RoomAllocation(Base):
    __tablename__ = 'room_allocations'

    id = Column(Integer, primary_key=True)
    itinerary_id = Column(Integer, ForeignKey('itineraries.id', ondelete='CASCADE'), nullable=False)
    room_type_id = Column(Integer, ForeignKey('room_types.id'), nullable=True)
    occupancy_type_id = Column(Integer, ForeignKey('occupancy_types.id'), nullable=True)
    meal_plan_id = Column(Integer, ForeignKey('meal_plans.id'), nullable=True)
    quantity = Column(Integer, default=1)
    guest_names = Column(Text, nullable=True)
    voucher_number = Column(String(100), nullable=True)

    itinerary = relationship("Itinerary", back_populates="room_allocations")
    room_type = relationship("RoomType")
    occupancy_type = relationship("OccupancyType")
    meal_plan = relationship("MealPlan")


class TransportDetail(Base):
    __tablename__ = 'transport_details'

    id = Column(Integer, primary_key=True)
    itinerary_id = Column(Integer, ForeignKey('itineraries.id', ondelete='CASCADE'), nullable=False)
    vehicle_type_id = Column(Integer, ForeignKey('vehicle_types.id'), nullable=True)
    quantity = Column(Integer, default=1)
    description = Column(Text, nullable=True)

    itinerary = relationship("Itinerary", back_populates="transport_details")
    vehicle_type = relationship("VehicleType")


class FlightDetail(Base):
    __tablename__ = 'flight_details'

    id = Column(Integer, primary_key=True)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='CASCADE'), nullable=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id', ondelete='CASCADE'), nullable=True)
    date = Column(String(50), nullable=True)
    flight_name = Column(String(100), nullable=True)
    flight_number = Column(String(50), nullable=True)
    from_location = Column(String(100), nullable=True)
    to_location = Column(String(100), nullable=True)
    departure_time = Column(String(50), nullable=True)
    arrival_time = Column(String(50), nullable=True)
    flight_duration = Column(String(50), nullable=True)

    tour_package = relationship("TourPackage", back_populates="flight_details")
    tour_package_query = relationship("TourPackageQuery", back_populates="flight_details")


class TourPackagePricing(Base):
    """Seasonal price period of a tour package"""
    __tablename__ = 'tour_package_pricings'

    id = Column(Integer, primary_key=True)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='CASCADE'), nullable=False)
    package_variant_id = Column(Integer, ForeignKey('package_variants.id', ondelete='CASCADE'), nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    meal_plan_id = Column(Integer, ForeignKey('meal_plans.id'), nullable=False)
    number_of_rooms = Column(Integer, default=1, nullable=False)
    vehicle_type_id = Column(Integer, ForeignKey('vehicle_types.id'), nullable=True)
    is_group_pricing = Column(Boolean, default=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package = relationship("TourPackage", back_populates="pricings")
    package_variant = relationship("PackageVariant", back_populates="pricings")
    meal_plan = relationship("MealPlan")
    vehicle_type = relationship("VehicleType")
    components = relationship(
        "PricingComponent", back_populates="tour_package_pricing",
        cascade="all, delete-orphan", order_by="PricingComponent.id"
    )


class PricingComponent(Base):
    __tablename__ = 'pricing_components'

    id = Column(Integer, primary_key=True)
    tour_package_pricing_id = Column(Integer, ForeignKey('tour_package_pricings.id', ondelete='CASCADE'), nullable=False)
    pricing_attribute_id = Column(Integer, ForeignKey('pricing_attributes.id'), nullable=False)
    price = Column(Numeric(12, 2), default=Decimal("0.00"))
    purchase_price = Column(Numeric(12, 2), nullable=True)
    description = Column(Text, nullable=True)

    tour_package_pricing = relationship("TourPackagePricing", back_populates="components")
    pricing_attribute = relationship("PricingAttribute")


class PackageVariant(Base):
    """Alternate hotel/pricing tier for the same itinerary"""
    __tablename__ = 'package_variants'

    id = Column(Integer, primary_key=True)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='CASCADE'), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False)
    sort_order = Column(Integer, default=0)
    price_modifier = Column(Numeric(8, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    tour_package = relationship("TourPackage", back_populates="variants")
    hotel_mappings = relationship("VariantHotelMapping", back_populates="variant", cascade="all, delete-orphan")
    pricings = relationship("TourPackagePricing", back_populates="package_variant")


class VariantHotelMapping(Base):
    __tablename__ = 'variant_hotel_mappings'

    id = Column(Integer, primary_key=True)
    package_variant_id = Column(Integer, ForeignKey('package_variants.id', ondelete='CASCADE'), nullable=False)
    itinerary_id = Column(Integer, ForeignKey('itineraries.id', ondelete='CASCADE'), nullable=False)
    hotel_id = Column(Integer, ForeignKey('hotels.id'), nullable=False)

    variant = relationship("PackageVariant", back_populates="hotel_mappings")
    itinerary = relationship("Itinerary")
    hotel = relationship("Hotel")

    __table_args__ = (
        UniqueConstraint('package_variant_id', 'itinerary_id', name='uq_variant_itinerary'),
    )


# ==================== TOUR PACKAGE QUERIES ====================

class TourPackageQuery(Base):
    """Customer booking record; financial transactions are scoped to it"""
    __tablename__ = 'tour_package_queries'

    id = Column(Integer, primary_key=True)
    tour_package_query_number = Column(String(50), nullable=True, unique=True)
    tour_package_query_name = Column(String(255), nullable=True)
    tour_package_query_type = Column(String(100), nullable=True)
    tour_category = Column(String(100), nullable=True)
    customer_name = Column(String(255), nullable=True)
    customer_number = Column(String(50), nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=False)
    tour_package_id = Column(Integer, ForeignKey('tour_packages.id', ondelete='SET NULL'), nullable=True)
    inquiry_id = Column(Integer, ForeignKey('inquiries.id', ondelete='SET NULL'), nullable=True)
    num_days_night = Column(String(50), nullable=True)
    period = Column(String(100), nullable=True)
    tour_starts_from = Column(Date, nullable=True)
    tour_ends_on = Column(Date, nullable=True)
    transport = Column(String(255), nullable=True)
    pickup_location = Column(String(255), nullable=True)
    drop_location = Column(String(255), nullable=True)
    tour_highlights = Column(Text, nullable=True)
    num_adults = Column(String(20), nullable=True)
    num_child_5_to_12 = Column(String(20), nullable=True)
    num_child_0_to_5 = Column(String(20), nullable=True)
    price = Column(String(100), nullable=True)
    price_per_adult = Column(String(100), nullable=True)
    price_per_child_or_extra_bed = Column(String(100), nullable=True)
    price_per_child_5_to_12_no_bed = Column(String(100), nullable=True)
    price_per_child_with_seat_below_5 = Column(String(100), nullable=True)
    total_price = Column(String(100), nullable=True)
    pricing_section = Column(JSON, default=list)
    remarks = Column(Text, nullable=True)
    inclusions = Column(JSON, default=list)
    exclusions = Column(JSON, default=list)
    important_notes = Column(JSON, default=list)
    payment_policy = Column(JSON, default=list)
    useful_tip = Column(JSON, default=list)
    cancellation_policy = Column(JSON, default=list)
    airline_cancellation_policy = Column(JSON, default=list)
    terms_conditions = Column(JSON, default=list)
    kitchen_group_policy = Column(JSON, default=list)
    selected_meal_plan_id = Column(Integer, ForeignKey('meal_plans.id'), nullable=True)
    selected_variant_ids = Column(JSON, default=list)
    variant_room_allocations = Column(JSON, default=dict)
    variant_transport_details = Column(JSON, default=dict)
    assigned_to = Column(String(255), nullable=True)
    assigned_to_mobile_number = Column(String(50), nullable=True)
    assigned_to_email = Column(String(255), nullable=True)
    is_featured = Column(Boolean, default=False)
    is_archived = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    customer = relationship("Customer")
    location = relationship("Location")
    tour_package = relationship("TourPackage")
    inquiry = relationship("Inquiry", back_populates="tour_package_queries")
    selected_meal_plan = relationship("MealPlan")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")
    itineraries = relationship(
        "Itinerary", back_populates="tour_package_query",
        cascade="all, delete-orphan", order_by="Itinerary.day_number"
    )
    flight_details = relationship(
        "FlightDetail", back_populates="tour_package_query",
        cascade="all, delete-orphan", order_by="FlightDetail.id"
    )
    variant_snapshots = relationship(
        "QueryVariantSnapshot", back_populates="tour_package_query",
        cascade="all, delete-orphan", order_by="QueryVariantSnapshot.sort_order"
    )

    sale_details = relationship("SaleDetail", back_populates="tour_package_query", order_by="SaleDetail.sale_date")
    purchase_details = relationship("PurchaseDetail", back_populates="tour_package_query", order_by="PurchaseDetail.purchase_date")
    receipt_details = relationship("ReceiptDetail", back_populates="tour_package_query", order_by="ReceiptDetail.receipt_date")
    payment_details = relationship("PaymentDetail", back_populates="tour_package_query", order_by="PaymentDetail.payment_date")
    expense_details = relationship("ExpenseDetail", back_populates="tour_package_query", order_by="ExpenseDetail.expense_date")
    income_details = relationship("IncomeDetail", back_populates="tour_package_query", order_by="IncomeDetail.income_date")


class QueryVariantSnapshot(Base):
    """Frozen copy of a package variant taken when it was offered on a query"""
    __tablename__ = 'query_variant_snapshots'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id', ondelete='CASCADE'), nullable=False)
    source_variant_id = Column(Integer, ForeignKey('package_variants.id', ondelete='SET NULL'), nullable=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_default = Column(Boolean, default=False)
    sort_order = Column(Integer, default=0)
    price_modifier = Column(Numeric(8, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="variant_snapshots")
    hotel_snapshots = relationship(
        "QueryVariantHotelSnapshot", back_populates="variant_snapshot",
        cascade="all, delete-orphan", order_by="QueryVariantHotelSnapshot.day_number"
    )
    pricing_snapshots = relationship(
        "QueryVariantPricingSnapshot", back_populates="variant_snapshot",
        cascade="all, delete-orphan", order_by="QueryVariantPricingSnapshot.start_date"
    )


class QueryVariantHotelSnapshot(Base):
    __tablename__ = 'query_variant_hotel_snapshots'

    id = Column(Integer, primary_key=True)
    variant_snapshot_id = Column(Integer, ForeignKey('query_variant_snapshots.id', ondelete='CASCADE'), nullable=False)
    day_number = Column(Integer, nullable=False)
    hotel_id = Column(Integer, ForeignKey('hotels.id', ondelete='SET NULL'), nullable=True)
    hotel_name = Column(String(255), nullable=False)
    location_label = Column(String(255), nullable=True)
    image_url = Column(String(1000), nullable=True)
    room_category = Column(String(100), nullable=True)

    variant_snapshot = relationship("QueryVariantSnapshot", back_populates="hotel_snapshots")


class QueryVariantPricingSnapshot(Base):
    __tablename__ = 'query_variant_pricing_snapshots'

    id = Column(Integer, primary_key=True)
    variant_snapshot_id = Column(Integer, ForeignKey('query_variant_snapshots.id', ondelete='CASCADE'), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    meal_plan_id = Column(Integer, nullable=True)
    meal_plan_name = Column(String(100), nullable=True)
    number_of_rooms = Column(Integer, default=1)
    is_group_pricing = Column(Boolean, default=False)
    vehicle_type_id = Column(Integer, nullable=True)
    vehicle_type_name = Column(String(100), nullable=True)
    total_price = Column(Numeric(12, 2), default=Decimal("0.00"))
    description = Column(Text, nullable=True)

    variant_snapshot = relationship("QueryVariantSnapshot", back_populates="pricing_snapshots")
    component_snapshots = relationship(
        "QueryVariantPricingComponentSnapshot", back_populates="pricing_snapshot",
        cascade="all, delete-orphan", order_by="QueryVariantPricingComponentSnapshot.id"
    )


class QueryVariantPricingComponentSnapshot(Base):
    __tablename__ = 'query_variant_pricing_component_snapshots'

    id = Column(Integer, primary_key=True)
    pricing_snapshot_id = Column(Integer, ForeignKey('query_variant_pricing_snapshots.id', ondelete='CASCADE'), nullable=False)
    pricing_attribute_id = Column(Integer, nullable=True)
    attribute_name = Column(String(255), nullable=False)
    price = Column(Numeric(12, 2), default=Decimal("0.00"))
    purchase_price = Column(Numeric(12, 2), nullable=True)
    description = Column(Text, nullable=True)

    pricing_snapshot = relationship("QueryVariantPricingSnapshot", back_populates="component_snapshots")


# ==================== SALES ====================

class SaleDetail(Base):
    __tablename__ = 'sale_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True)
    sale_date = Column(Date, nullable=False)
    invoice_number = Column(String(100), nullable=True)
    invoice_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    state_of_supply = Column(String(100), nullable=True)
    sale_price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    gst_amount = Column(Numeric(12, 2), nullable=True)
    gst_percentage = Column(Numeric(5, 2), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="sale_details")
    customer = relationship("Customer", back_populates="sale_details")
    items = relationship("SaleItem", back_populates="sale_detail", cascade="all, delete-orphan", order_by="SaleItem.id")
    sale_returns = relationship("SaleReturn", back_populates="sale_detail", cascade="all, delete-orphan")


class SaleItem(Base):
    __tablename__ = 'sale_items'

    id = Column(Integer, primary_key=True)
    sale_detail_id = Column(Integer, ForeignKey('sale_details.id', ondelete='CASCADE'), nullable=False)
    product_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_of_measure_id = Column(Integer, ForeignKey('units_of_measure.id'), nullable=True)
    price_per_unit = Column(Numeric(14, 4), nullable=False)
    tax_slab_id = Column(Integer, ForeignKey('tax_slabs.id'), nullable=True)
    tax_amount = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)

    sale_detail = relationship("SaleDetail", back_populates="items")
    unit_of_measure = relationship("UnitOfMeasure")
    tax_slab = relationship("TaxSlab")


class SaleReturn(Base):
    __tablename__ = 'sale_returns'

    id = Column(Integer, primary_key=True)
    sale_detail_id = Column(Integer, ForeignKey('sale_details.id', ondelete='CASCADE'), nullable=False)
    return_date = Column(Date, nullable=False)
    return_reason = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    gst_amount = Column(Numeric(12, 2), nullable=True)
    reference = Column(String(100), nullable=True)
    status = Column(String(20), default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow)

    sale_detail = relationship("SaleDetail", back_populates="sale_returns")
    items = relationship("SaleReturnItem", back_populates="sale_return", cascade="all, delete-orphan", order_by="SaleReturnItem.id")


class SaleReturnItem(Base):
    __tablename__ = 'sale_return_items'

    id = Column(Integer, primary_key=True)
    sale_return_id = Column(Integer, ForeignKey('sale_returns.id', ondelete='CASCADE'), nullable=False)
    product_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_of_measure_id = Column(Integer, ForeignKey('units_of_measure.id'), nullable=True)
    price_per_unit = Column(Numeric(14, 4), nullable=False)
    tax_slab_id = Column(Integer, ForeignKey('tax_slabs.id'), nullable=True)
    tax_amount = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)

    sale_return = relationship("SaleReturn", back_populates="items")


# ==================== PURCHASES ====================

class PurchaseDetail(Base):
    __tablename__ = 'purchase_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=True)
    purchase_date = Column(Date, nullable=False)
    bill_number = Column(String(100), nullable=True)
    bill_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    state_of_supply = Column(String(100), nullable=True)
    reference_number = Column(String(100), nullable=True)
    price = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    gst_amount = Column(Numeric(12, 2), nullable=True)
    gst_percentage = Column(Numeric(5, 2), nullable=True)
    description = Column(Text, nullable=True)
    status = Column(String(20), default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="purchase_details")
    supplier = relationship("Supplier", back_populates="purchase_details")
    items = relationship("PurchaseItem", back_populates="purchase_detail", cascade="all, delete-orphan", order_by="PurchaseItem.id")
    purchase_returns = relationship("PurchaseReturn", back_populates="purchase_detail", cascade="all, delete-orphan")


class PurchaseItem(Base):
    __tablename__ = 'purchase_items'

    id = Column(Integer, primary_key=True)
    purchase_detail_id = Column(Integer, ForeignKey('purchase_details.id', ondelete='CASCADE'), nullable=False)
    product_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_of_measure_id = Column(Integer, ForeignKey('units_of_measure.id'), nullable=True)
    price_per_unit = Column(Numeric(14, 4), nullable=False)
    tax_slab_id = Column(Integer, ForeignKey('tax_slabs.id'), nullable=True)
    tax_amount = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)

    purchase_detail = relationship("PurchaseDetail", back_populates="items")
    unit_of_measure = relationship("UnitOfMeasure")
    tax_slab = relationship("TaxSlab")


class PurchaseReturn(Base):
    __tablename__ = 'purchase_returns'

    id = Column(Integer, primary_key=True)
    purchase_detail_id = Column(Integer, ForeignKey('purchase_details.id', ondelete='CASCADE'), nullable=False)
    return_date = Column(Date, nullable=False)
    return_reason = Column(Text, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False, default=Decimal("0.00"))
    gst_amount = Column(Numeric(12, 2), nullable=True)
    reference = Column(String(100), nullable=True)
    status = Column(String(20), default=TransactionStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.utcnow)

    purchase_detail = relationship("PurchaseDetail", back_populates="purchase_returns")
    items = relationship("PurchaseReturnItem", back_populates="purchase_return", cascade="all, delete-orphan", order_by="PurchaseReturnItem.id")


class PurchaseReturnItem(Base):
    __tablename__ = 'purchase_return_items'

    id = Column(Integer, primary_key=True)
    purchase_return_id = Column(Integer, ForeignKey('purchase_returns.id', ondelete='CASCADE'), nullable=False)
    product_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Numeric(12, 2), nullable=False)
    unit_of_measure_id = Column(Integer, ForeignKey('units_of_measure.id'), nullable=True)
    price_per_unit = Column(Numeric(14, 4), nullable=False)
    tax_slab_id = Column(Integer, ForeignKey('tax_slabs.id'), nullable=True)
    tax_amount = Column(Numeric(12, 2), nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)

    purchase_return = relationship("PurchaseReturn", back_populates="items")


# ==================== MONEY MOVEMENTS ====================

class ReceiptDetail(Base):
    """Money received from a customer into a bank or cash account"""
    __tablename__ = 'receipt_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    customer_id = Column(Integer, ForeignKey('customers.id'), nullable=True)
    receipt_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    receipt_type = Column(String(50), default="customer_payment")
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="receipt_details")
    customer = relationship("Customer", back_populates="receipt_details")
    bank_account = relationship("BankAccount")
    cash_account = relationship("CashAccount")


class PaymentDetail(Base):
    """Money paid to a supplier from a bank or cash account"""
    __tablename__ = 'payment_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=True)
    payment_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(50), nullable=True)
    transaction_id = Column(String(100), nullable=True)
    note = Column(Text, nullable=True)
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="payment_details")
    supplier = relationship("Supplier", back_populates="payment_details")
    bank_account = relationship("BankAccount")
    cash_account = relationship("CashAccount")
    tds_transactions = relationship(
        "TdsTransaction", back_populates="payment_detail",
        cascade="all, delete-orphan", order_by="TdsTransaction.id"
    )


class ExpenseDetail(Base):
    __tablename__ = 'expense_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    expense_category_id = Column(Integer, ForeignKey('expense_categories.id'), nullable=True)
    expense_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    is_accrued = Column(Boolean, default=False)
    accrued_date = Column(Date, nullable=True)
    paid_date = Column(Date, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="expense_details")
    expense_category = relationship("ExpenseCategory")
    bank_account = relationship("BankAccount")
    cash_account = relationship("CashAccount")
    images = relationship("Image", cascade="all, delete-orphan", order_by="Image.id")


class IncomeDetail(Base):
    __tablename__ = 'income_details'

    id = Column(Integer, primary_key=True)
    tour_package_query_id = Column(Integer, ForeignKey('tour_package_queries.id'), nullable=True)
    income_category_id = Column(Integer, ForeignKey('income_categories.id'), nullable=True)
    income_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)
    bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    tour_package_query = relationship("TourPackageQuery", back_populates="income_details")
    income_category = relationship("IncomeCategory")
    bank_account = relationship("BankAccount")
    cash_account = relationship("CashAccount")


class Transfer(Base):
    """Movement between two bank/cash accounts"""
    __tablename__ = 'transfers'

    id = Column(Integer, primary_key=True)
    from_bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    from_cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    to_bank_account_id = Column(Integer, ForeignKey('bank_accounts.id'), nullable=True)
    to_cash_account_id = Column(Integer, ForeignKey('cash_accounts.id'), nullable=True)
    transfer_date = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    reference = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    from_bank_account = relationship("BankAccount", foreign_keys=[from_bank_account_id])
    from_cash_account = relationship("CashAccount", foreign_keys=[from_cash_account_id])
    to_bank_account = relationship("BankAccount", foreign_keys=[to_bank_account_id])
    to_cash_account = relationship("CashAccount", foreign_keys=[to_cash_account_id])


# ==================== INQUIRIES ====================

class Inquiry(Base):
    """Customer enquiry logged before any tour package query exists"""
    __tablename__ = 'inquiries'

    id = Column(Integer, primary_key=True)
    customer_name = Column(String(255), nullable=False)
    customer_mobile_number = Column(String(50), nullable=False)
    location_id = Column(Integer, ForeignKey('locations.id'), nullable=False)
    journey_date = Column(Date, nullable=False)
    num_adults = Column(Integer, default=0)
    num_children_above_11 = Column(Integer, default=0)
    num_children_5_to_11 = Column(Integer, default=0)
    num_children_below_5 = Column(Integer, default=0)
    status = Column(String(20), default=InquiryStatus.PENDING.value, nullable=False)
    remarks = Column(Text, nullable=True)
    created_by_id = Column(Integer, ForeignKey('users.id', ondelete='SET NULL'), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    location = relationship("Location")
    created_by = relationship("User")
    actions = relationship(
        "InquiryAction", back_populates="inquiry",
        cascade="all, delete-orphan", order_by="InquiryAction.action_date.desc()"
    )
    tour_package_queries = relationship("TourPackageQuery", back_populates="inquiry")


class InquiryAction(Base):
    """Follow-up logged against an inquiry"""
    __tablename__ = 'inquiry_actions'

    id = Column(Integer, primary_key=True)
    inquiry_id = Column(Integer, ForeignKey('inquiries.id', ondelete='CASCADE'), nullable=False)
    action_type = Column(String(50), nullable=False)
    remarks = Column(Text, nullable=False)
    action_date = Column(DateTime, default=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)

    inquiry = relationship("Inquiry", back_populates="actions")


# ==================== TDS ====================

class TdsChallan(Base):
    """Deposit of deducted tax with the government; soft deleted"""
    __tablename__ = 'tds_challans'

    id = Column(Integer, primary_key=True)
    challan_serial_no = Column(String(30), nullable=True)
    bsr_code = Column(String(20), nullable=True)
    deposit_date = Column(Date, nullable=True)
    payment_mode = Column(String(20), nullable=True)
    bank_name = Column(String(100), nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    notes = Column(Text, nullable=True)
    updated_by = Column(String(100), nullable=True)
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    transactions = relationship("TdsTransaction", back_populates="challan", order_by="TdsTransaction.id")


class TdsTransaction(Base):
    """Tax deducted at source from a supplier payment"""
    __tablename__ = 'tds_transactions'

    id = Column(Integer, primary_key=True)
    payment_detail_id = Column(Integer, ForeignKey('payment_details.id', ondelete='CASCADE'), nullable=False)
    supplier_id = Column(Integer, ForeignKey('suppliers.id'), nullable=True)
    challan_id = Column(Integer, ForeignKey('tds_challans.id'), nullable=True)
    section_code = Column(String(20), nullable=False)
    tds_type = Column(String(20), default="income_tax")
    base_amount = Column(Numeric(12, 2), nullable=False)
    applied_rate = Column(Numeric(5, 2), nullable=False)
    tds_amount = Column(Numeric(12, 2), nullable=False)
    financial_year = Column(String(9), nullable=False)
    quarter = Column(String(2), nullable=False)
    pan = Column(String(20), nullable=True)
    status = Column(String(20), default=TdsStatus.PENDING.value, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    payment_detail = relationship("PaymentDetail", back_populates="tds_transactions")
    supplier = relationship("Supplier")
    challan = relationship("TdsChallan", back_populates="transactions")
