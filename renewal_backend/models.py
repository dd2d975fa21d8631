from __future__ import annotations

from datetime import date
from typing import Any, Literal, Optional, Type, TypeVar, Union

from pydantic import BaseModel, field_validator

ActivityType = Literal[
    "renewal_created",
    "renewal_updated",
    "renewal_deleted",
    "payment_received",
    "notification_sent",
]


def _reject_none(v):
    # update fields are optional to omit, but NOT NULL columns cannot be cleared
    if v is None:
        raise ValueError("field cannot be null")
    return v


class ClientCreate(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    gst: Optional[str] = None
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    gst: Optional[str] = None
    notes: Optional[str] = None

    not_null = field_validator("name", "email")(_reject_none)


class ServiceCreate(BaseModel):
    name: str
    description: Optional[str] = None
    default_price: float
    default_duration: int  # months


class ServiceUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    default_price: Optional[float] = None
    default_duration: Optional[int] = None

    not_null = field_validator("name", "default_price", "default_duration")(_reject_none)


class RenewalCreate(BaseModel):
    client_id: int
    service_id: int
    start_date: date
    end_date: date
    amount: float
    is_paid: bool = False
    notes: Optional[str] = None


class RenewalUpdate(BaseModel):
    client_id: Optional[int] = None
    service_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    amount: Optional[float] = None
    is_paid: Optional[bool] = None
    notes: Optional[str] = None

    not_null = field_validator(
        "client_id", "service_id", "start_date", "end_date", "amount", "is_paid"
    )(_reject_none)


class ActivityCreate(BaseModel):
    type: ActivityType
    description: str
    metadata: Union[dict[str, Any], str, None] = None


M = TypeVar("M", bound=BaseModel)


def coerce(model: Type[M], data: Union[M, dict]) -> M:
    """Accept either the model itself or a plain dict payload."""
    if isinstance(data, model):
        return data
    return model.model_validate(data)


def supplied_fields(model: Type[BaseModel], data: Union[BaseModel, dict]) -> dict[str, Any]:
    """Fields the caller explicitly supplied, in model field order."""
    obj = coerce(model, data)
    return obj.model_dump(exclude_unset=True)
