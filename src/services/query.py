import math
import structlog

from typing import Optional, List

from core.errors import BadRequestError, NotFoundError
from models.registrant import Registrant, RegistrantStatus
from schemas.registrant import (
    RegistrantList, Pagination, ListFilters, DeleteResult, DeletedRegistrant, BulkDeleteResult
)
from stores.registrants import RegistrantStore, RegistrantQuery
from utils.dates import utcnow


log = structlog.get_logger()

SORTABLE_FIELDS = ("registrationDate", "name", "email", "status", "createdAt", "updatedAt")
SORT_ORDERS = ("asc", "desc")


def check_status(status: Optional[str]) -> str:
    if not status:
        raise BadRequestError("Status is required")
    if status not in RegistrantStatus.values():
        raise BadRequestError(f"Status must be one of: {', '.join(RegistrantStatus.values())}")
    return status


class AdminQueryService:

    def __init__(self, registrants: RegistrantStore, max_page_size: int = 100, clock=utcnow):
        self.registrants = registrants
        self.max_page_size = max_page_size
        self.clock = clock

    async def list(
        self,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "registrationDate",
        sort_order: str = "desc",
    ) -> RegistrantList:
        if page < 1:
            raise BadRequestError("page must be at least 1")
        if limit < 1:
            raise BadRequestError("limit must be at least 1")
        if limit > self.max_page_size:
            raise BadRequestError(f"limit cannot exceed {self.max_page_size}")
        if status:
            check_status(status)
        if sort_by not in SORTABLE_FIELDS:
            raise BadRequestError(f"sortBy must be one of: {', '.join(SORTABLE_FIELDS)}")
        if sort_order not in SORT_ORDERS:
            raise BadRequestError("sortOrder must be asc or desc")

        if search is not None and not search.strip():
            search = None
        query = RegistrantQuery(
            status=status or None,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
            skip=(page - 1) * limit,
            limit=limit,
        )
        users, total = await self.registrants.search(query)

        return RegistrantList(
            users=users,
            pagination=Pagination(
                current=page,
                pages=math.ceil(total / limit),
                total=total,
                limit=limit,
            ),
            filters=ListFilters(status=query.status, search=query.search, sortBy=sort_by, sortOrder=sort_order),
        )

    async def get(self, registrant_id: str) -> Registrant:
        registrant = await self.registrants.get(registrant_id)
        if not registrant:
            raise NotFoundError("User not found")
        return registrant

    async def update_status(self, registrant_id: str, status: Optional[str]) -> Registrant:
        check_status(status)
        registrant = await self.registrants.update_status(registrant_id, status, self.clock())
        if not registrant:
            raise NotFoundError("User not found")
        log.info("registrant.status_updated", id=registrant_id, status=status)
        return registrant

    async def delete(self, registrant_id: str) -> DeleteResult:
        registrant = await self.registrants.delete(registrant_id)
        if not registrant:
            raise NotFoundError("User not found")
        log.info("registrant.deleted", id=registrant_id)
        return DeleteResult(
            deletedUser=DeletedRegistrant(id=registrant.id, name=registrant.name, email=registrant.email)
        )

    async def delete_many(self, registrant_ids: Optional[List[str]]) -> BulkDeleteResult:
        if not registrant_ids:
            raise BadRequestError("User IDs array is required")
        deleted = await self.registrants.delete_many(registrant_ids)
        log.info("registrant.bulk_deleted", requested=len(registrant_ids), deleted=deleted)
        return BulkDeleteResult(deletedCount=deleted)
