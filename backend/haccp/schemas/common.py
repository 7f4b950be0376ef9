import math
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Literal, Optional, List
from datetime import datetime, timezone

TargetType = Literal["refrigerator", "menu"]
Role = Literal["User", "Manager", "Admin", "SuperAdmin"]

class LoginIn(BaseModel):
    username: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class UserIn(BaseModel):
    id: Optional[str] = None
    name: str = Field(min_length=1)
    username: str = Field(min_length=1)
    password: Optional[str] = None
    email: Optional[EmailStr] = None
    role: Role = "User"
    status: str = "Active"
    facility_id: Optional[str] = None
    email_alerts: bool = False
    telegram_alerts: bool = False
    telegram_chat_id: Optional[str] = None
    all_facilities_alerts: bool = False

    @field_validator("email", "facility_id", "telegram_chat_id", mode="before")
    @classmethod
    def _blank_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

class UserOut(BaseModel):
    id: str; name: str; username: str; email: Optional[str]; role: str; status: str
    facility_id: Optional[str]
    email_alerts: bool; telegram_alerts: bool; telegram_chat_id: Optional[str]; all_facilities_alerts: bool
    class Config: from_attributes = True

class AlertSubscription(BaseModel):
    email_alerts: Optional[bool] = None
    telegram_alerts: Optional[bool] = None
    all_facilities_alerts: Optional[bool] = None

class FacilityIn(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    supervisor_id: Optional[str] = None
    cooking_method_id: Optional[str] = None

class FacilityOut(FacilityIn):
    class Config: from_attributes = True

class RefrigeratorIn(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    facility_id: str = Field(min_length=1)
    type_id: Optional[str] = None

class RefrigeratorOut(RefrigeratorIn):
    class Config: from_attributes = True

class CheckpointIn(BaseModel):
    name: str = Field(min_length=1)
    min_temp: float
    max_temp: float

    @field_validator("max_temp")
    @classmethod
    def _ordered(cls, v, info):
        lo = info.data.get("min_temp")
        if lo is not None and v < lo:
            raise ValueError("max_temp must not be below min_temp")
        return v

class CheckpointOut(CheckpointIn):
    class Config: from_attributes = True

class EquipmentTypeIn(BaseModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    kind: TargetType
    checkpoints: List[CheckpointIn] = []

    @field_validator("checkpoints")
    @classmethod
    def _unique_names(cls, v):
        names = [c.name for c in v]
        if len(names) != len(set(names)):
            raise ValueError("checkpoint names must be unique within a type")
        return v

class EquipmentTypeOut(EquipmentTypeIn):
    checkpoints: List[CheckpointOut] = []
    class Config: from_attributes = True

class ReadingIn(BaseModel):
    id: Optional[str] = None
    target_id: str = Field(min_length=1)
    target_type: TargetType
    checkpoint_name: str = Field(min_length=1)
    value: float
    timestamp: Optional[datetime] = None
    user_id: str = Field(min_length=1)
    facility_id: str = Field(min_length=1)
    reason: Optional[str] = None

    @field_validator("value")
    @classmethod
    def _finite(cls, v):
        if not math.isfinite(v):
            raise ValueError("value must be a finite number")
        return v

    @field_validator("timestamp")
    @classmethod
    def _naive_utc(cls, v):
        # Stored without an offset, so aware times are converted to UTC first
        if v is not None and v.tzinfo is not None:
            return v.astimezone(timezone.utc).replace(tzinfo=None)
        return v

class ReadingOut(ReadingIn):
    id: str
    timestamp: datetime
    class Config: from_attributes = True

class ReadingBatch(BaseModel):
    items: List[ReadingIn]

class AlertOut(BaseModel):
    id: str; reading_id: str; facility_id: str; facility_name: str; target_name: str; checkpoint_name: str
    value: float; min: float; max: float; timestamp: datetime; user_id: str; user_name: str; resolved: bool
    class Config: from_attributes = True

class ResolveAllOut(BaseModel):
    resolved: int

class AuditLogOut(BaseModel):
    id: int; timestamp: datetime; user_id: Optional[str]; user_name: str; action: str; entity: str; details: str
    class Config: from_attributes = True

class SmtpConfig(BaseModel):
    host: str = Field(min_length=1)
    port: int = 587
    # Implicit TLS (port 465 style); STARTTLS is used otherwise
    secure: Optional[bool] = None
    user: str = Field(min_length=1)
    password: str
    from_address: Optional[str] = None

    @property
    def use_ssl(self) -> bool:
        return self.secure if self.secure is not None else self.port == 465

    @property
    def sender(self) -> str:
        # Some providers reject a from-address that differs from the login
        return self.from_address or self.user

class SmtpConfigOut(BaseModel):
    host: str; port: int; secure: bool; user: str; from_address: str; password_set: bool

class ChatConfig(BaseModel):
    bot_token: str = Field(min_length=1)
    chat_id: str = Field(min_length=1)

class ChatConfigOut(BaseModel):
    chat_id: str; token_set: bool

class TestEmailIn(BaseModel):
    to: Optional[EmailStr] = None

class BotStatus(BaseModel):
    ok: bool
    bot_name: Optional[str] = None
    error: Optional[str] = None
