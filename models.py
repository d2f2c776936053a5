from datetime import datetime, date
from pydantic import BaseModel, EmailStr, Field
from typing import Optional, Literal

Role = Literal["admin", "manager", "employee"]
ShiftStatus = Literal["scheduled", "pending", "completed", "cancelled", "no_show"]

TIME_OF_DAY = r"^([01]\d|2[0-3]):[0-5]\d$"

# alias for fields that are themselves named "date"
CalendarDate = date


class LoginIn(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class PasswordChangeIn(BaseModel):
    current_password: Optional[str] = None
    new_password: str = Field(min_length=6)


class UserCreate(BaseModel):
    username: Optional[str] = None
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Role = "employee"
    hourly_rate: Optional[float] = Field(default=None, ge=0, le=1000)
    phone: Optional[str] = None
    is_temporary: bool = False
    password: Optional[str] = Field(default=None, min_length=6)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    hourly_rate: Optional[float] = Field(default=None, ge=0, le=1000)
    phone: Optional[str] = None


class LocationCreate(BaseModel):
    name: str = Field(min_length=1)
    address: str
    city: str
    postal_code: str
    country: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    geofence_radius: Optional[float] = Field(default=None, gt=0)
    is_active: bool = True


class ShiftCreate(BaseModel):
    user_id: str = Field(min_length=1)
    location_id: str = Field(min_length=1)
    date: date
    start_time: str = Field(pattern=TIME_OF_DAY)
    end_time: str = Field(pattern=TIME_OF_DAY)
    role: str = Field(min_length=1)
    notes: Optional[str] = None


class RecurringShiftCreate(ShiftCreate):
    # 0 = Sunday ... 6 = Saturday
    days_of_week: list[int] = Field(min_length=1)
    end_date: Optional[date] = None


class ShiftUpdate(BaseModel):
    user_id: Optional[str] = None
    location_id: Optional[str] = None
    date: Optional[CalendarDate] = None
    start_time: Optional[str] = Field(default=None, pattern=TIME_OF_DAY)
    end_time: Optional[str] = Field(default=None, pattern=TIME_OF_DAY)
    role: Optional[str] = None
    notes: Optional[str] = None
    version: Optional[int] = None


class VersionIn(BaseModel):
    version: Optional[int] = None


class CheckInCreate(BaseModel):
    location_id: str = Field(min_length=1)
    shift_id: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    notes: Optional[str] = None


class CheckOutIn(BaseModel):
    notes: Optional[str] = None
    break_duration: Optional[int] = Field(default=None, ge=0)


class SwapCreate(BaseModel):
    original_shift_id: str = Field(min_length=1)
    target_user_id: Optional[str] = None
    target_shift_id: Optional[str] = None
    reason: Optional[str] = None
    deadline: Optional[datetime] = None


class TimeOffCreate(BaseModel):
    shift_id: str = Field(min_length=1)
    reason: Optional[str] = None


class ReviewIn(BaseModel):
    approved: bool
    review_notes: Optional[str] = None
    version: Optional[int] = None


class PolicyUpdate(BaseModel):
    company_name: Optional[str] = None
    time_zone: Optional[str] = None
    currency: Optional[str] = None
    default_shift_duration: Optional[float] = Field(default=None, gt=0)
    overtime_threshold: Optional[float] = Field(default=None, gt=0)
    break_duration: Optional[int] = Field(default=None, ge=0)
    geofencing_enabled: Optional[bool] = None
    default_geofence_radius: Optional[float] = Field(default=None, gt=0)
    pay_period: Optional[Literal["weekly", "biweekly", "monthly"]] = None
    overtime_rate: Optional[float] = Field(default=None, ge=1)
    tax_rate: Optional[float] = Field(default=None, ge=0, le=100)
    password_expiry: Optional[int] = Field(default=None, ge=0)
    session_timeout: Optional[int] = Field(default=None, gt=0)
