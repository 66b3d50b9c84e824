import base64
from datetime import date as date_, datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator


def _b64(value):
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(value).decode("ascii")
    return value


def _camel(name: str, camel: str, *default):
    """Field read by its snake_case name (or camelCase) and written as camelCase."""
    return Field(*default, validation_alias=AliasChoices(name, camel), serialization_alias=camel)


# --- User ---

class UserCreate(BaseModel):
    email: str = Field(min_length=3)
    name: str = ""


class UserResponse(BaseModel):
    id: int
    email: str
    name: str
    is_admin: bool
    registered_at: datetime

    model_config = {"from_attributes": True}


class UserStatsResponse(BaseModel):
    lost_items: int
    found_items: int


class PreferencesResponse(BaseModel):
    minimum_similarity: int
    include_location_alerts: bool
    include_new_items: bool
    max_daily: int

    model_config = {"from_attributes": True}


class PreferencesUpdate(BaseModel):
    minimum_similarity: int | None = Field(None, ge=0, le=100)
    include_location_alerts: bool | None = None
    include_new_items: bool | None = None
    max_daily: int | None = Field(None, ge=0)


# --- Item ---

class ItemCreate(BaseModel):
    type: Literal["lost", "found"]
    category: str = Field(min_length=1)
    item_name: str = Field(min_length=1, validation_alias=AliasChoices("item_name", "itemName"))
    description: str = ""
    location: str = Field(min_length=1)
    date: date_
    contact_info: str = Field("", validation_alias=AliasChoices("contact_info", "contactInfo"))
    image: str | None = None  # base64


class ItemResponse(BaseModel):
    id: int
    type: str
    category: str
    item_name: str
    description: str
    location: str
    date: date_ | None
    contact_info: str
    user_id: int
    status: str
    image: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("image", mode="before")
    @classmethod
    def encode_image(cls, value):
        return _b64(value)


class ItemListResponse(BaseModel):
    items: list[ItemResponse]
    total: int


class MatchResponse(BaseModel):
    item: ItemResponse
    score: int

    model_config = {"from_attributes": True}


class ItemReportResponse(BaseModel):
    item: ItemResponse
    matches: list[MatchResponse]
    notifications_created: int
    match_notifications_created: int
    failures: int


class DescriptionAnalysisResponse(BaseModel):
    description: str
    colors: list[str]
    item_type: str
    suggested_locations: list[str]
    time_frame: str
    condition: str
    confidence: int

    model_config = {"from_attributes": True}


class LocationPredictionResponse(BaseModel):
    location: str
    confidence: int
    similar_items_found: int

    model_config = {"from_attributes": True}


class ItemAnalysisResponse(BaseModel):
    item_id: int
    description: DescriptionAnalysisResponse
    suggested_matches: list[MatchResponse]
    predicted_locations: list[LocationPredictionResponse]


# --- Notification ---

class NotificationResponse(BaseModel):
    """Wire shape of a stored notification (camelCase on output)."""

    id: int
    user_id: int = _camel("user_id", "userId")
    item_id: int | None = _camel("item_id", "itemId", None)
    item_name: str = _camel("item_name", "itemName", "")
    location: str
    type: str
    date: date_ | None = None
    image: str | None = None
    message: str
    read_status: bool = _camel("read_status", "readStatus")
    is_viewed: bool = _camel("is_viewed", "isViewed")
    created_at: datetime = _camel("created_at", "createdAt")

    model_config = {"from_attributes": True}

    @field_validator("image", mode="before")
    @classmethod
    def encode_image(cls, value):
        return _b64(value)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    count: int


# --- Insights ---

class LocationStatResponse(BaseModel):
    location: str
    lost_count: int
    found_count: int
    total_reports: int
    loss_probability: int
    recovery_rate: int

    model_config = {"from_attributes": True}


class HotspotResponse(BaseModel):
    per_location: list[LocationStatResponse]
    high_risk: list[LocationStatResponse]
    high_recovery: list[LocationStatResponse]

    model_config = {"from_attributes": True}


class CategoryCount(BaseModel):
    category: str
    count: int


class LocationSummaryResponse(BaseModel):
    location: str
    total_reports: int
    lost_items: int
    found_items: int
    most_common_categories: list[CategoryCount]
    loss_risk: int


class FraudFlagResponse(BaseModel):
    type: str
    severity: str
    message: str

    model_config = {"from_attributes": True}


class TrustReportResponse(BaseModel):
    user_id: int
    risk_level: str
    needs_review: bool
    flags: list[FraudFlagResponse]

    model_config = {"from_attributes": True}


class ClaimCheckResponse(BaseModel):
    is_valid: bool
    issues: list[FraudFlagResponse]

    model_config = {"from_attributes": True}


# --- System ---

class ServiceStatus(BaseModel):
    name: str
    status: str  # "ok", "degraded", "unavailable"
    detail: str = ""


class HealthResponse(BaseModel):
    status: str
    scheduler_running: bool
    item_count: int
    active_count: int
    services: list[ServiceStatus] = []
