from enum import Enum
from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from utils.dates import from_storage


class RegistrantStatus(str, Enum):
    REGISTERED = "registered"
    CONFIRMED = "confirmed"
    ATTENDED = "attended"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls):
        return [s.value for s in cls]


class Registrant(BaseModel):
    id: str
    name: str
    email: str
    registrationDate: datetime
    status: RegistrantStatus = RegistrantStatus.REGISTERED
    emailSent: bool = False
    emailSentAt: Optional[datetime] = None
    reminderSent: bool = False
    reminderSentAt: Optional[datetime] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "Registrant":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            email=doc["email"],
            registrationDate=from_storage(doc["registrationDate"]),
            status=doc.get("status", RegistrantStatus.REGISTERED.value),
            emailSent=doc.get("emailSent", False),
            emailSentAt=from_storage(doc.get("emailSentAt")),
            reminderSent=doc.get("reminderSent", False),
            reminderSentAt=from_storage(doc.get("reminderSentAt")),
            createdAt=from_storage(doc.get("createdAt")),
            updatedAt=from_storage(doc.get("updatedAt")),
        )
