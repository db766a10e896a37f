from pydantic import BaseModel
from typing import Optional
from datetime import datetime

from utils.dates import from_storage


class Admin(BaseModel):
    """Admin account as seen by the rest of the app. Never carries the password hash."""
    id: str
    name: str
    email: str
    role: str = "admin"
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: dict) -> "Admin":
        return cls(
            id=str(doc["_id"]),
            name=doc["name"],
            email=doc["email"],
            role=doc.get("role", "admin"),
            createdAt=from_storage(doc.get("createdAt")),
            updatedAt=from_storage(doc.get("updatedAt")),
        )


class AdminCredentials(BaseModel):
    admin: Admin
    password_hash: str
