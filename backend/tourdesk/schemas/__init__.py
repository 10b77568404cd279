"""
Pydantic Schemas for API Validation
"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator, model_validator
from typing import Dict, List, Optional
from datetime import datetime, date
from decimal import Decimal
from enum import Enum


POLICY_FIELDS = (
    "inclusions",
    "exclusions",
    "important_notes",
    "payment_policy",
    "useful_tip",
    "cancellation_policy",
    "airline_cancellation_policy",
    "terms_conditions",
    "kitchen_group_policy",
)


def as_policy_list(value):
    """Policy text arrives either as a list or as one string"""
    if value is None:
        return None
    if isinstance(value, str):
        return [value] if value.strip() else []
    return list(value)


# ==================== ENUMS ====================

class UserRoleEnum(str, Enum):
    ADMIN = "admin"
    ACCOUNTS = "accounts"
    OPERATIONS = "operations"
    ASSOCIATE = "associate"


class TransportPricingTypeEnum(str, Enum):
    PER_DAY = "PerDay"
    PER_TRIP = "PerTrip"


class TransactionStatusEnum(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class InquiryStatusEnum(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class TdsTypeEnum(str, Enum):
    INCOME_TAX = "income_tax"
    GST = "gst"


# ==================== AUTH SCHEMAS ====================

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)
    confirm_password: str


class MessageResponse(BaseModel):
    message: str


# ==================== USER SCHEMAS ====================

class UserBase(BaseModel):
    username: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    full_name: Optional[str] = Field(None, max_length=255)


class UserCreate(UserBase):
    password: str = Field(..., min_length=6)
    role: UserRoleEnum = UserRoleEnum.OPERATIONS


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    full_name: Optional[str] = Field(None, max_length=255)
    role: Optional[UserRoleEnum] = None
    is_active: Optional[bool] = None


class UserResponse(UserBase):
    id: int
    role: str
    is_active: bool
    last_login: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# ==================== LOOKUP SCHEMAS ====================

class LookupCreate(BaseModel):
    """Shared body for the lookup tables; extra columns are ignored where a table lacks them"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: bool = True
    max_persons: Optional[int] = Field(None, ge=1)
    rank: Optional[int] = None
    code: Optional[str] = Field(None, max_length=20)
    sort_order: Optional[int] = None
    percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    abbreviation: Optional[str] = Field(None, max_length=20)


class LookupUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    max_persons: Optional[int] = Field(None, ge=1)
    rank: Optional[int] = None
    code: Optional[str] = Field(None, max_length=20)
    sort_order: Optional[int] = None
    percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    abbreviation: Optional[str] = Field(None, max_length=20)


# ==================== IMAGE SCHEMAS ====================

class ImageCreate(BaseModel):
    url: str = Field(..., min_length=1, max_length=1000)


# ==================== LOCATION & HOTEL SCHEMAS ====================

class LocationCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=255)
    tags: Optional[str] = None
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: bool = True
    images: List[str] = []


class LocationUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=255)
    tags: Optional[str] = None
    slug: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    images: Optional[List[str]] = None


class HotelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location_id: int
    link: Optional[str] = None
    destination: Optional[str] = None
    is_active: bool = True
    images: List[str] = []


class HotelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    location_id: Optional[int] = None
    link: Optional[str] = None
    destination: Optional[str] = None
    is_active: Optional[bool] = None
    images: Optional[List[str]] = None


class HotelPricingCreate(BaseModel):
    room_type_id: int
    occupancy_type_id: int
    meal_plan_id: Optional[int] = None
    start_date: date
    end_date: date
    price: Decimal = Field(..., ge=0)
    is_active: bool = True


class HotelPricingUpdate(BaseModel):
    room_type_id: Optional[int] = None
    occupancy_type_id: Optional[int] = None
    meal_plan_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class TransportPricingCreate(BaseModel):
    location_id: int
    vehicle_type_id: int
    transport_type: TransportPricingTypeEnum = TransportPricingTypeEnum.PER_DAY
    start_date: date
    end_date: date
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    is_active: bool = True


class TransportPricingUpdate(BaseModel):
    location_id: Optional[int] = None
    vehicle_type_id: Optional[int] = None
    transport_type: Optional[TransportPricingTypeEnum] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    is_active: Optional[bool] = None


# ==================== CRM SCHEMAS ====================

class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)
    is_active: bool = True


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    contact: Optional[str] = Field(None, max_length=50)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    gstin: Optional[str] = Field(None, max_length=20)
    is_active: Optional[bool] = None


class SupplierCreate(CustomerCreate):
    pass


class SupplierUpdate(CustomerUpdate):
    pass


# ==================== BANKING SCHEMAS ====================

class BankAccountCreate(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=255)
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch: Optional[str] = None
    opening_balance: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True


class BankAccountUpdate(BaseModel):
    account_name: Optional[str] = Field(None, min_length=1, max_length=255)
    bank_name: Optional[str] = None
    account_number: Optional[str] = None
    ifsc_code: Optional[str] = None
    branch: Optional[str] = None
    opening_balance: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class CashAccountCreate(BaseModel):
    account_name: str = Field(..., min_length=1, max_length=255)
    opening_balance: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True


class CashAccountUpdate(BaseModel):
    account_name: Optional[str] = Field(None, min_length=1, max_length=255)
    opening_balance: Optional[Decimal] = Field(None, ge=0)
    is_active: Optional[bool] = None


class TransferCreate(BaseModel):
    from_bank_account_id: Optional[int] = None
    from_cash_account_id: Optional[int] = None
    to_bank_account_id: Optional[int] = None
    to_cash_account_id: Optional[int] = None
    transfer_date: date
    amount: Decimal = Field(..., gt=0)
    reference: Optional[str] = None
    description: Optional[str] = None


class TransferUpdate(BaseModel):
    from_bank_account_id: Optional[int] = None
    from_cash_account_id: Optional[int] = None
    to_bank_account_id: Optional[int] = None
    to_cash_account_id: Optional[int] = None
    transfer_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    reference: Optional[str] = None
    description: Optional[str] = None


# ==================== ITINERARY SCHEMAS ====================

class ActivityInput(BaseModel):
    activity_title: Optional[str] = None
    activity_description: Optional[str] = None
    location_id: Optional[int] = None
    images: List[str] = []


class RoomAllocationInput(BaseModel):
    room_type_id: Optional[int] = None
    occupancy_type_id: Optional[int] = None
    meal_plan_id: Optional[int] = None
    quantity: Optional[int] = Field(1, ge=0)
    guest_names: Optional[str] = None
    voucher_number: Optional[str] = None


class TransportDetailInput(BaseModel):
    vehicle_type_id: Optional[int] = None
    quantity: Optional[int] = Field(1, ge=0)
    description: Optional[str] = None


class ItineraryInput(BaseModel):
    day_number: Optional[int] = None
    days: Optional[str] = None
    itinerary_title: Optional[str] = None
    itinerary_description: Optional[str] = None
    location_id: int
    hotel_id: Optional[int] = None
    number_of_rooms: Optional[str] = None
    room_category: Optional[str] = None
    meals_included: Optional[str] = None
    images: List[str] = []
    activities: List[ActivityInput] = []
    room_allocations: List[RoomAllocationInput] = []
    transport_details: List[TransportDetailInput] = []


class FlightDetailInput(BaseModel):
    date: Optional[str] = None
    flight_name: Optional[str] = None
    flight_number: Optional[str] = None
    from_location: Optional[str] = None
    to_location: Optional[str] = None
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    flight_duration: Optional[str] = None


# ==================== TOUR PACKAGE SCHEMAS ====================

class PackageFields(BaseModel):
    """Descriptive fields shared by tour packages and tour package queries"""
    tour_category: Optional[str] = None
    num_days_night: Optional[str] = None
    period: Optional[str] = None
    transport: Optional[str] = None
    pickup_location: Optional[str] = None
    drop_location: Optional[str] = None
    tour_highlights: Optional[str] = None
    num_adults: Optional[str] = None
    num_child_5_to_12: Optional[str] = None
    num_child_0_to_5: Optional[str] = None
    price: Optional[str] = None
    price_per_adult: Optional[str] = None
    price_per_child_or_extra_bed: Optional[str] = None
    price_per_child_5_to_12_no_bed: Optional[str] = None
    price_per_child_with_seat_below_5: Optional[str] = None
    total_price: Optional[str] = None
    pricing_section: Optional[List[dict]] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    important_notes: Optional[List[str]] = None
    payment_policy: Optional[List[str]] = None
    useful_tip: Optional[List[str]] = None
    cancellation_policy: Optional[List[str]] = None
    airline_cancellation_policy: Optional[List[str]] = None
    terms_conditions: Optional[List[str]] = None
    kitchen_group_policy: Optional[List[str]] = None
    is_featured: Optional[bool] = None
    is_archived: Optional[bool] = None

    @field_validator(*POLICY_FIELDS, mode="before")
    @classmethod
    def coerce_policy(cls, value):
        return as_policy_list(value)


class TourPackageCreate(PackageFields):
    tour_package_name: Optional[str] = Field(None, max_length=255)
    tour_package_type: Optional[str] = None
    location_id: int
    slug: Optional[str] = None
    website_sort_order: Optional[int] = None
    itineraries: List[ItineraryInput] = []
    flight_details: List[FlightDetailInput] = []
    images: List[str] = []


class TourPackageUpdate(PackageFields):
    tour_package_name: Optional[str] = Field(None, max_length=255)
    tour_package_type: Optional[str] = None
    location_id: Optional[int] = None
    slug: Optional[str] = None
    website_sort_order: Optional[int] = None
    itineraries: Optional[List[ItineraryInput]] = None
    flight_details: Optional[List[FlightDetailInput]] = None
    images: Optional[List[str]] = None


class PricingComponentInput(BaseModel):
    pricing_attribute_id: int
    price: Decimal = Field(default=Decimal("0"), ge=0)
    purchase_price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None


class TourPackagePricingCreate(BaseModel):
    package_variant_id: Optional[int] = None
    start_date: date
    end_date: date
    meal_plan_id: int
    number_of_rooms: int = Field(default=1, ge=1)
    vehicle_type_id: Optional[int] = None
    is_group_pricing: bool = False
    description: Optional[str] = None
    is_active: bool = True
    components: List[PricingComponentInput] = []

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be on or after start date")
        return self


class TourPackagePricingUpdate(BaseModel):
    package_variant_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    meal_plan_id: Optional[int] = None
    number_of_rooms: Optional[int] = Field(None, ge=1)
    vehicle_type_id: Optional[int] = None
    is_group_pricing: Optional[bool] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
    components: Optional[List[PricingComponentInput]] = None


class VariantHotelMappingInput(BaseModel):
    itinerary_id: int
    hotel_id: int


class PackageVariantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_default: bool = False
    sort_order: int = 0
    price_modifier: Optional[Decimal] = None
    hotel_mappings: List[VariantHotelMappingInput] = []


class PackageVariantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_default: Optional[bool] = None
    sort_order: Optional[int] = None
    price_modifier: Optional[Decimal] = None
    hotel_mappings: Optional[List[VariantHotelMappingInput]] = None


# ==================== TOUR PACKAGE QUERY SCHEMAS ====================

class TourPackageQueryFields(PackageFields):
    tour_package_query_number: Optional[str] = Field(None, max_length=50)
    tour_package_query_name: Optional[str] = Field(None, max_length=255)
    tour_package_query_type: Optional[str] = None
    customer_name: Optional[str] = None
    customer_number: Optional[str] = None
    customer_id: Optional[int] = None
    tour_package_id: Optional[int] = None
    inquiry_id: Optional[int] = None
    tour_starts_from: Optional[date] = None
    tour_ends_on: Optional[date] = None
    remarks: Optional[str] = None
    selected_meal_plan_id: Optional[int] = None
    selected_variant_ids: Optional[List[int]] = None
    variant_room_allocations: Optional[Dict[str, Dict[str, List[RoomAllocationInput]]]] = None
    variant_transport_details: Optional[Dict[str, Dict[str, List[TransportDetailInput]]]] = None
    assigned_to: Optional[str] = None
    assigned_to_mobile_number: Optional[str] = None
    assigned_to_email: Optional[str] = None


class TourPackageQueryCreate(TourPackageQueryFields):
    location_id: int
    itineraries: List[ItineraryInput] = []
    flight_details: List[FlightDetailInput] = []
    images: List[str] = []


class TourPackageQueryUpdate(TourPackageQueryFields):
    location_id: Optional[int] = None
    itineraries: Optional[List[ItineraryInput]] = None
    flight_details: Optional[List[FlightDetailInput]] = None
    images: Optional[List[str]] = None


class QueryFromPackageRequest(BaseModel):
    tour_package_query_name: Optional[str] = None
    customer_name: Optional[str] = None
    customer_number: Optional[str] = None
    customer_id: Optional[int] = None
    tour_starts_from: Optional[date] = None
    tour_ends_on: Optional[date] = None
    selected_variant_ids: Optional[List[int]] = None


class VariantSnapshotRequest(BaseModel):
    variant_ids: List[int] = Field(..., min_length=1)
    overwrite: bool = True


# ==================== PRICING SCHEMAS ====================

class PricingItineraryInput(BaseModel):
    id: Optional[int] = None
    location_id: int
    day_number: Optional[int] = None
    hotel_id: Optional[int] = None
    room_allocations: List[RoomAllocationInput] = []
    transport_details: List[TransportDetailInput] = []


class PricingCalculateRequest(BaseModel):
    tour_starts_from: Optional[date] = None
    tour_ends_on: Optional[date] = None
    itineraries: List[PricingItineraryInput] = []
    markup: Decimal = Field(default=Decimal("0"), ge=0)


class VariantPricingCalculateRequest(PricingCalculateRequest):
    variant_ids: List[int] = []
    tour_package_id: Optional[int] = None
    variant_room_allocations: Dict[str, Dict[str, List[RoomAllocationInput]]] = {}
    variant_transport_details: Dict[str, Dict[str, List[TransportDetailInput]]] = {}


class PackagePriceRequest(BaseModel):
    tour_package_id: int
    package_variant_id: Optional[int] = None
    journey_date: date
    meal_plan_id: int
    room_allocations: List[RoomAllocationInput] = []


class LineItemInput(BaseModel):
    product_name: Optional[str] = None
    quantity: Decimal = Field(default=Decimal("0"), ge=0)
    price_per_unit: Decimal = Field(default=Decimal("0"), ge=0)
    tax_slab_id: Optional[int] = None
    tax_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    total_amount: Optional[Decimal] = Field(None, ge=0)


class LineItemsRequest(BaseModel):
    items: List[LineItemInput] = []
    changed_total_index: Optional[int] = None


# ==================== TRANSACTION ITEM SCHEMAS ====================

class TransactionItemInput(BaseModel):
    product_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    quantity: Decimal = Field(..., gt=0)
    unit_of_measure_id: Optional[int] = None
    price_per_unit: Decimal = Field(..., gt=0)
    tax_slab_id: Optional[int] = None
    tax_amount: Optional[Decimal] = Field(None, ge=0)
    total_amount: Optional[Decimal] = Field(None, ge=0)


class ReturnItemInput(TransactionItemInput):
    price_per_unit: Decimal = Field(..., ge=0)


# ==================== SALES SCHEMAS ====================

class SaleDetailCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    customer_id: Optional[int] = None
    sale_date: date
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    state_of_supply: Optional[str] = None
    sale_price: Decimal = Field(..., ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    gst_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None
    status: TransactionStatusEnum = TransactionStatusEnum.PENDING
    items: List[TransactionItemInput] = []


class SaleDetailUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    customer_id: Optional[int] = None
    sale_date: Optional[date] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    due_date: Optional[date] = None
    state_of_supply: Optional[str] = None
    sale_price: Optional[Decimal] = Field(None, ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    gst_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None
    status: Optional[TransactionStatusEnum] = None
    items: Optional[List[TransactionItemInput]] = None


class SaleReturnCreate(BaseModel):
    sale_detail_id: int
    return_date: date
    return_reason: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    reference: Optional[str] = None
    status: TransactionStatusEnum = TransactionStatusEnum.PENDING
    items: List[ReturnItemInput] = []


class SaleReturnUpdate(BaseModel):
    return_date: Optional[date] = None
    return_reason: Optional[str] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    reference: Optional[str] = None
    status: Optional[TransactionStatusEnum] = None
    items: Optional[List[ReturnItemInput]] = None


# ==================== PURCHASE SCHEMAS ====================

class PurchaseDetailCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    supplier_id: Optional[int] = None
    purchase_date: date
    bill_number: Optional[str] = None
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    state_of_supply: Optional[str] = None
    reference_number: Optional[str] = None
    price: Decimal = Field(..., ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    gst_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None
    status: TransactionStatusEnum = TransactionStatusEnum.PENDING
    items: List[TransactionItemInput] = []


class PurchaseDetailUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    supplier_id: Optional[int] = None
    purchase_date: Optional[date] = None
    bill_number: Optional[str] = None
    bill_date: Optional[date] = None
    due_date: Optional[date] = None
    state_of_supply: Optional[str] = None
    reference_number: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    gst_percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    description: Optional[str] = None
    status: Optional[TransactionStatusEnum] = None
    items: Optional[List[TransactionItemInput]] = None


class PurchaseReturnCreate(BaseModel):
    purchase_detail_id: int
    return_date: date
    return_reason: Optional[str] = None
    amount: Decimal = Field(..., ge=0)
    gst_amount: Optional[Decimal] = Field(None, ge=0)
    reference: Optional[str] = None
    status: TransactionStatusEnum = TransactionStatusEnum.PENDING
    items: List[ReturnItemInput] = []


class PurchaseReturnUpdate(SaleReturnUpdate):
    pass


# ==================== RECEIPT & PAYMENT SCHEMAS ====================

class ReceiptCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    customer_id: Optional[int] = None
    receipt_date: date
    amount: Decimal = Field(..., ge=0)
    reference: Optional[str] = None
    note: Optional[str] = None
    receipt_type: str = "customer_payment"
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


class ReceiptUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    customer_id: Optional[int] = None
    receipt_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    reference: Optional[str] = None
    note: Optional[str] = None
    receipt_type: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


class PaymentCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    supplier_id: Optional[int] = None
    payment_date: date
    amount: Decimal = Field(..., ge=0)
    method: Optional[str] = None
    transaction_id: Optional[str] = None
    note: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


class PaymentUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    supplier_id: Optional[int] = None
    payment_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    method: Optional[str] = None
    transaction_id: Optional[str] = None
    note: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


# ==================== EXPENSE & INCOME SCHEMAS ====================

class ExpenseCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    expense_category_id: Optional[int] = None
    expense_date: date
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None
    is_accrued: bool = False
    accrued_date: Optional[date] = None
    images: List[str] = []


class ExpenseUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    expense_category_id: Optional[int] = None
    expense_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None
    images: Optional[List[str]] = None


class ExpensePayRequest(BaseModel):
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None
    paid_date: date


class IncomeCreate(BaseModel):
    tour_package_query_id: Optional[int] = None
    income_category_id: Optional[int] = None
    income_date: date
    amount: Decimal = Field(..., ge=0)
    description: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


class IncomeUpdate(BaseModel):
    tour_package_query_id: Optional[int] = None
    income_category_id: Optional[int] = None
    income_date: Optional[date] = None
    amount: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = None
    bank_account_id: Optional[int] = None
    cash_account_id: Optional[int] = None


# ==================== ACCOUNTING REPLACEMENT ====================

class QueryAccountingUpdate(BaseModel):
    """Every list that is present replaces the query's records of that kind"""
    purchase_details: Optional[List[PurchaseDetailCreate]] = None
    sale_details: Optional[List[SaleDetailCreate]] = None
    payment_details: Optional[List[PaymentCreate]] = None
    receipt_details: Optional[List[ReceiptCreate]] = None
    expense_details: Optional[List[ExpenseCreate]] = None
    income_details: Optional[List[IncomeCreate]] = None


# ==================== INQUIRY SCHEMAS ====================

class InquiryFields(BaseModel):
    num_adults: Optional[int] = Field(None, ge=0)
    num_children_above_11: Optional[int] = Field(None, ge=0)
    num_children_5_to_11: Optional[int] = Field(None, ge=0)
    num_children_below_5: Optional[int] = Field(None, ge=0)
    remarks: Optional[str] = None


class InquiryCreate(InquiryFields):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_mobile_number: str = Field(..., min_length=1, max_length=50)
    location_id: int
    journey_date: date
    num_adults: int = Field(0, ge=0)
    num_children_above_11: int = Field(0, ge=0)
    num_children_5_to_11: int = Field(0, ge=0)
    num_children_below_5: int = Field(0, ge=0)
    status: InquiryStatusEnum = InquiryStatusEnum.PENDING


class InquiryUpdate(InquiryFields):
    customer_name: Optional[str] = Field(None, min_length=1, max_length=255)
    customer_mobile_number: Optional[str] = Field(None, min_length=1, max_length=50)
    location_id: Optional[int] = None
    journey_date: Optional[date] = None
    status: Optional[InquiryStatusEnum] = None


class InquiryActionCreate(BaseModel):
    action_type: str = Field(..., min_length=1, max_length=50)
    remarks: str = Field(..., min_length=1)
    action_date: Optional[datetime] = None


class QueryFromInquiryRequest(BaseModel):
    tour_package_query_name: Optional[str] = None
    customer_id: Optional[int] = None
    tour_ends_on: Optional[date] = None


# ==================== TDS SCHEMAS ====================

class TdsTransactionCreate(BaseModel):
    payment_detail_id: int
    section_code: str = Field(..., min_length=1, max_length=20)
    tds_type: TdsTypeEnum = TdsTypeEnum.INCOME_TAX
    base_amount: Optional[Decimal] = Field(None, ge=0)
    applied_rate: Decimal = Field(..., ge=0, le=100)
    tds_amount: Optional[Decimal] = Field(None, ge=0)
    pan: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


class TdsChallanCreate(BaseModel):
    challan_serial_no: Optional[str] = Field(None, max_length=30)
    bsr_code: Optional[str] = Field(None, max_length=20)
    deposit_date: Optional[date] = None
    payment_mode: Optional[str] = Field(None, max_length=20)
    bank_name: Optional[str] = Field(None, max_length=100)
    amount: Optional[Decimal] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=500)
    transaction_ids: List[int] = []


class TdsChallanAttach(BaseModel):
    transaction_ids: List[int] = Field(..., min_length=1)


class TdsChallanDeposit(BaseModel):
    deposit_date: Optional[date] = None
