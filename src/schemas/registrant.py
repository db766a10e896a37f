from pydantic import BaseModel, EmailStr, Field, field_validator
from datetime import datetime
from typing import Optional, List

from models.registrant import Registrant, RegistrantStatus
from schemas.validators import normalize_email, normalize_name


class RegisterRequest(BaseModel):
    name: str
    email: EmailStr

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return normalize_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return normalize_email(v)


class RegistrantPublic(BaseModel):
    id: str
    name: str
    email: str
    registrationDate: datetime
    status: RegistrantStatus

    @classmethod
    def from_registrant(cls, registrant: Registrant) -> "RegistrantPublic":
        return cls(
            id=registrant.id,
            name=registrant.name,
            email=registrant.email,
            registrationDate=registrant.registrationDate,
            status=registrant.status,
        )


class StatusUpdateRequest(BaseModel):
    status: Optional[str] = None


class BulkDeleteRequest(BaseModel):
    userIds: Optional[List[str]] = None


class DeletedRegistrant(BaseModel):
    id: str
    name: str
    email: str


class DeleteResult(BaseModel):
    deletedUser: DeletedRegistrant


class BulkDeleteResult(BaseModel):
    deletedCount: int


class Pagination(BaseModel):
    current: int
    pages: int
    total: int
    limit: int


class ListFilters(BaseModel):
    status: Optional[str] = None
    search: Optional[str] = None
    sortBy: str
    sortOrder: str


class RegistrantList(BaseModel):
    users: List[Registrant]
    pagination: Pagination
    filters: ListFilters


class Growth(BaseModel):
    daily: int
    weekly: int
    monthly: int


class Overview(BaseModel):
    total: int
    today: int
    yesterday: int
    thisWeek: int
    thisMonth: int
    emailsSent: int
    remindersSent: int
    growth: Growth


class StatusCount(BaseModel):
    status: str
    count: int


class DailyCount(BaseModel):
    date: str
    count: int


class RecentRegistration(BaseModel):
    name: str
    email: str
    registrationDate: datetime
    status: RegistrantStatus


class Statistics(BaseModel):
    overview: Overview
    byStatus: List[StatusCount]
    dailyRegistrations: List[DailyCount]
    recentRegistrations: List[RecentRegistration]


class PublicStats(BaseModel):
    totalRegistrations: int
    confirmedAttendees: int
    actualAttendees: int


class ReminderFailure(BaseModel):
    email: str
    error: str


class ReminderResult(BaseModel):
    sentCount: int
    failedCount: int = 0
    errors: List[ReminderFailure] = Field(default_factory=list)


class ResendResult(BaseModel):
    user: DeletedRegistrant
