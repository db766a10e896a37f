import re

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Tuple, Dict, Iterable

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from models.registrant import Registrant, RegistrantStatus
from stores import DuplicateEmailError
from utils.dates import to_storage, from_storage

PUBLIC_PROJECTION = {"__v": 0}


@dataclass
class RegistrantQuery:
    status: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = "registrationDate"
    sort_order: str = "desc"
    skip: int = 0
    limit: int = 10


def build_filter(status: Optional[str] = None, search: Optional[str] = None) -> dict:
    filters: dict = {}
    if status:
        filters["status"] = status
    if search:
        pattern = re.escape(search)
        filters["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"email": {"$regex": pattern, "$options": "i"}},
        ]
    return filters


def date_range(since: Optional[datetime] = None, until: Optional[datetime] = None) -> dict:
    window: dict = {}
    if since is not None:
        window["$gte"] = to_storage(since)
    if until is not None:
        window["$lt"] = to_storage(until)
    return {"registrationDate": window} if window else {}


def parse_id(value) -> Optional[ObjectId]:
    # ObjectId(None) would mint a fresh id, so only hex strings are accepted
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


class RegistrantStore:
    """Registrant documents in MongoDB. All datetimes in and out are timezone-aware."""

    def __init__(self, collection):
        self.collection = collection

    async def ensure_indexes(self):
        await self.collection.create_index("email", unique=True)
        await self.collection.create_index("registrationDate")

    async def find_by_email(self, email: str) -> Optional[Registrant]:
        doc = await self.collection.find_one({"email": email}, PUBLIC_PROJECTION)
        return Registrant.from_document(doc) if doc else None

    async def get(self, registrant_id: str) -> Optional[Registrant]:
        oid = parse_id(registrant_id)
        if oid is None:
            return None
        doc = await self.collection.find_one({"_id": oid}, PUBLIC_PROJECTION)
        return Registrant.from_document(doc) if doc else None

    async def insert(self, name: str, email: str, now: datetime) -> Registrant:
        stamp = to_storage(now)
        doc = {
            "name": name,
            "email": email,
            "registrationDate": stamp,
            "status": RegistrantStatus.REGISTERED.value,
            "emailSent": False,
            "emailSentAt": None,
            "reminderSent": False,
            "reminderSentAt": None,
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            raise DuplicateEmailError(email)
        doc["_id"] = result.inserted_id
        return Registrant.from_document(doc)

    async def search(self, query: RegistrantQuery) -> Tuple[List[Registrant], int]:
        filters = build_filter(query.status, query.search)
        direction = DESCENDING if query.sort_order == "desc" else ASCENDING
        cursor = (
            self.collection
            .find(filters, PUBLIC_PROJECTION)
            .sort([(query.sort_by, direction), ("_id", direction)])
            .skip(query.skip)
            .limit(query.limit)
        )
        results = []
        async for doc in cursor:
            results.append(Registrant.from_document(doc))
        total = await self.collection.count_documents(filters)
        return results, total

    async def update_fields(self, registrant_id: str, fields: dict, now: datetime) -> Optional[Registrant]:
        oid = parse_id(registrant_id)
        if oid is None:
            return None
        update = {k: to_storage(v) if isinstance(v, datetime) else v for k, v in fields.items()}
        update["updatedAt"] = to_storage(now)
        doc = await self.collection.find_one_and_update(
            {"_id": oid},
            {"$set": update},
            projection=PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER,
        )
        return Registrant.from_document(doc) if doc else None

    async def update_status(self, registrant_id: str, status: str, now: datetime) -> Optional[Registrant]:
        return await self.update_fields(registrant_id, {"status": status}, now)

    async def mark_email_sent(self, registrant_id: str, now: datetime) -> Optional[Registrant]:
        return await self.update_fields(registrant_id, {"emailSent": True, "emailSentAt": now}, now)

    async def mark_reminder_sent(self, registrant_id: str, now: datetime) -> Optional[Registrant]:
        return await self.update_fields(registrant_id, {"reminderSent": True, "reminderSentAt": now}, now)

    async def delete(self, registrant_id: str) -> Optional[Registrant]:
        oid = parse_id(registrant_id)
        if oid is None:
            return None
        doc = await self.collection.find_one_and_delete({"_id": oid})
        return Registrant.from_document(doc) if doc else None

    async def delete_many(self, registrant_ids: Iterable[str]) -> int:
        oids = [oid for oid in (parse_id(i) for i in registrant_ids) if oid is not None]
        if not oids:
            return 0
        result = await self.collection.delete_many({"_id": {"$in": oids}})
        return result.deleted_count

    async def count(self, since: Optional[datetime] = None, until: Optional[datetime] = None, **equals) -> int:
        filters = date_range(since, until)
        filters.update(equals)
        return await self.collection.count_documents(filters)

    async def count_by_status(self) -> Dict[str, int]:
        # documents without a status are counted as "unknown"
        pipeline = [{"$group": {"_id": {"$ifNull": ["$status", "unknown"]}, "count": {"$sum": 1}}}]
        counts = {}
        async for row in self.collection.aggregate(pipeline):
            counts[row["_id"]] = row["count"]
        return counts

    async def registration_dates(self, since: datetime, until: datetime) -> List[datetime]:
        cursor = self.collection.find(date_range(since, until), {"registrationDate": 1, "_id": 0})
        return [from_storage(doc["registrationDate"]) async for doc in cursor]

    async def recent(self, limit: int = 10) -> List[Registrant]:
        cursor = self.collection.find({}, PUBLIC_PROJECTION).sort("registrationDate", DESCENDING).limit(limit)
        return [Registrant.from_document(doc) async for doc in cursor]

    async def pending_reminders(self) -> List[Registrant]:
        filters = {
            "status": {"$in": [RegistrantStatus.REGISTERED.value, RegistrantStatus.CONFIRMED.value]},
            "reminderSent": {"$ne": True},
        }
        cursor = self.collection.find(filters, PUBLIC_PROJECTION)
        return [Registrant.from_document(doc) async for doc in cursor]
