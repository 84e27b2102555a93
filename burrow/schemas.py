from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, conint
from pydantic.alias_generators import to_camel

from .filters_catalog import ANY_COUNT, ANY_NEIGHBORHOOD, DEFAULT_SORT
from .settings import settings

FetchStatus = Literal["idle", "loading", "succeeded", "failed"]
SortBy = Literal["newest", "price_low", "price_high"]
InterestStatus = Literal["pending", "approved", "declined", "withdrawn"]


class CamelModel(BaseModel):
    """Backend JSON is camelCase; Python attributes stay snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ServerModel(CamelModel):
    # Server-owned entities keep fields we do not model.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


# ---------- Filters ----------

def _default_price_range() -> tuple[int, int]:
    return (0, settings.DEFAULT_MAX_PRICE)


class FilterState(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    search_term: str = ""
    category: Optional[str] = None
    room_type: Optional[str] = None
    neighborhood: Optional[str] = ANY_NEIGHBORHOOD
    rent_range: Optional[str] = None                       # dropdown label, e.g. "$1000 - $1500"
    price_range_values: tuple[int, int] = Field(default_factory=_default_price_range)
    bedrooms: str = ANY_COUNT                              # "0" means any
    bathrooms: str = ANY_COUNT
    amenities: tuple[str, ...] = ()
    sqft_range: tuple[Optional[int], Optional[int]] = (None, None)
    sort_by: SortBy = DEFAULT_SORT
    max_price_for_slider: int = Field(default_factory=lambda: settings.DEFAULT_MAX_PRICE)


class FilterIntent(CamelModel):
    """Filter values requested from outside (URL query or navigation state).

    ``None`` means the source said nothing about that field.
    """

    category: Optional[str] = None
    room_type: Optional[str] = None
    neighborhood: Optional[str] = None
    rent_range: Optional[str] = None
    bedrooms: Optional[str] = None
    bathrooms: Optional[str] = None
    search: Optional[str] = None
    amenities: Optional[tuple[str, ...]] = None
    sqft_min: Optional[conint(ge=0)] = None
    sqft_max: Optional[conint(ge=0)] = None


class FilterUpdate(FilterIntent):
    """Direct edits from the filter panel, including slider and sort controls."""

    price_range_values: Optional[tuple[int, int]] = None
    sort_by: Optional[SortBy] = None
    max_price_for_slider: Optional[int] = None


class NavigationState(BaseModel):
    filters: Optional[dict] = None


# ---------- Properties ----------

class PaginationInfo(CamelModel):
    current_page: int
    total_pages: int
    total_items: int
    items_per_page: Optional[int] = None


class Location(BaseModel):
    lat: float
    lng: float


class Overview(ServerModel):
    title: Optional[str] = None
    category: str
    room_type: str
    neighborhood: str
    rent: float


class ListingDetails(ServerModel):
    size: Optional[float] = None
    bedrooms: int
    bathrooms: int
    floor_no: Optional[int] = None


class AddressAndLocation(ServerModel):
    address: str
    location: Optional[Location] = None


class Property(ServerModel):
    id: str = Field(alias="_id")
    user_id: Optional[str] = None
    overview: Overview
    listing_details: ListingDetails
    amenities: list[str] = Field(default_factory=list)
    address_and_location: AddressAndLocation
    building_name: Optional[str] = None
    lease_length: Optional[str] = None
    description: Optional[str] = None
    images: list[str] = Field(default_factory=list)
    status: Optional[Literal["Active", "Pending", "Inactive"]] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class PropertyPage(BaseModel):
    properties: list[Property] = Field(default_factory=list)
    pagination: Optional[PaginationInfo] = None


class NewAddress(BaseModel):
    address: str
    lat: float
    lng: float


class NewOverview(CamelModel):
    title: Optional[str] = None
    category: str
    room_type: str
    neighborhood: str
    rent: float = Field(gt=0)


class NewListingDetails(CamelModel):
    size: Optional[float] = None
    bedrooms: conint(ge=1, le=5)
    bathrooms: conint(ge=1, le=3)
    floor_no: int = 0


class NewPropertyData(CamelModel):
    overview: NewOverview
    listing_details: NewListingDetails
    amenities: list[str] = Field(default_factory=list)
    address_and_location: NewAddress
    building_name: Optional[str] = None
    lease_length: str
    description: str


class UploadFile(BaseModel):
    filename: str
    content_type: str
    content: bytes


class UploadTarget(CamelModel):
    signed_url: str
    public_url: str


class PriceStats(CamelModel):
    total: int = 0
    affordable: int = 0
    mid_range: int = 0
    expensive: int = 0
    average_price: int = 0


# ---------- Interests / ambassador / contracts ----------

class Interest(ServerModel):
    id: str = Field(alias="_id")
    property_id: Optional[dict | str] = None
    lister_id: Optional[dict | str] = None
    renter_id: Optional[dict | str] = None
    message: str = ""
    move_in_date: Optional[str] = None
    status: InterestStatus
    stream_channel_id: Optional[str] = None
    created_at: Optional[datetime] = None


class InspectionPoint(BaseModel):
    text: str = Field(min_length=1)
    details: str = ""


class AmbassadorRequestCreate(CamelModel):
    property_id: str
    property_title: Optional[str] = None
    inspection_points: list[InspectionPoint] = Field(min_length=1)
    preferred_dates: str = Field(min_length=1)
    contact_info: str = Field(min_length=1)


class AmbassadorRequest(ServerModel):
    id: str = Field(alias="_id")
    property_id: Optional[dict | str] = None
    lister_id: Optional[dict | str] = None
    requester_id: Optional[dict | str] = None
    ambassador_id: Optional[dict | str] = None
    inspection_points: list[InspectionPoint] = Field(default_factory=list)
    preferred_dates: Optional[str] = None
    contact_info: Optional[str] = None
    status: str
    property_title: Optional[str] = None
    scheduled_date: Optional[datetime] = None
    created_at: Optional[datetime] = None


class AmbassadorReview(CamelModel):
    summary: str = Field(min_length=1)
    findings: list[InspectionPoint] = Field(default_factory=list)
    rating: Optional[conint(ge=1, le=5)] = None


ContractStatusName = Literal[
    "DRAFT", "PENDING_TENANT_SIGNATURE", "PENDING_LISTER_SIGNATURE", "COMPLETED", "CANCELLED",
]


class Contract(ServerModel):
    id: str = Field(alias="_id")
    status: ContractStatusName
    property: Optional[dict | str] = None
    lister: Optional[dict | str] = None
    tenant: Optional[dict | str] = None
    final_pdf_url: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: Optional[datetime] = None


class User(ServerModel):
    id: Optional[str] = Field(default=None, alias="_id")
    name: Optional[str] = None
    email: str
    phone: Optional[str] = None
    is_ambassador: bool = False


# ---------- Profiles / notifications ----------

class Profile(BaseModel):
    # profile documents keep the backend's snake_case field names
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = Field(default=None, alias="_id")
    user_id: Optional[str] = Field(default=None, alias="userId")
    username: str
    school_email: Optional[str] = None
    majors_minors: Optional[str] = None
    school_attending: Optional[str] = None
    about: Optional[str] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")


class ProfileUpdate(BaseModel):
    username: str = Field(min_length=1)
    school_email: str = Field(min_length=1)
    majors_minors: Optional[str] = None
    school_attending: Optional[str] = None
    about: Optional[str] = None


class Notification(ServerModel):
    id: str = Field(alias="_id")
    user_id: Optional[str] = None
    type: str = ""
    message: str = ""
    is_read: bool = False
    link: Optional[str] = None
    created_at: Optional[datetime] = None


class NotificationPage(CamelModel):
    notifications: list[Notification] = Field(default_factory=list)
    pagination: Optional[PaginationInfo] = None


# ---------- BFF responses ----------

class ListingView(CamelModel):
    filters: FilterState
    api_filters: dict[str, str]
    properties: list[Property]
    pagination: Optional[PaginationInfo] = None
    status: FetchStatus
    error: Optional[str] = None
    query: str = ""
    price_stats: PriceStats = Field(default_factory=PriceStats)
