import asyncio
import structlog

from core.errors import ConflictError, NotFoundError
from schemas.registrant import (
    RegistrantPublic, DeletedRegistrant, ReminderResult, ReminderFailure, ResendResult
)
from stores import DuplicateEmailError
from stores.registrants import RegistrantStore
from utils.dates import utcnow


log = structlog.get_logger()

DUPLICATE_MESSAGE = "Email already registered for this webinar"


class RegistrationService:

    def __init__(self, registrants: RegistrantStore, mailer, clock=utcnow):
        self.registrants = registrants
        self.mailer = mailer
        self.clock = clock

    async def register(self, name: str, email: str) -> RegistrantPublic:
        """
        Creates a registrant and sends the confirmation email inline.
        Expects `name` and `email` already trimmed and validated.
        A delivery failure propagates, so the caller sees an error even though
        the registrant was stored.
        """
        if await self.registrants.find_by_email(email):
            log.info("registration.duplicate", email=email)
            raise ConflictError(DUPLICATE_MESSAGE)

        try:
            registrant = await self.registrants.insert(name, email, self.clock())
        except DuplicateEmailError:
            # lost the race against a concurrent registration
            log.info("registration.duplicate_race", email=email)
            raise ConflictError(DUPLICATE_MESSAGE)
        log.info("registration.created", id=registrant.id, email=email)

        await asyncio.to_thread(self.mailer.send_confirmation, registrant.name, registrant.email)
        await self.registrants.mark_email_sent(registrant.id, self.clock())

        return RegistrantPublic.from_registrant(registrant)

    async def resend_confirmation(self, registrant_id: str) -> ResendResult:
        registrant = await self.registrants.get(registrant_id)
        if not registrant:
            raise NotFoundError("User not found")

        await asyncio.to_thread(self.mailer.send_confirmation, registrant.name, registrant.email)
        await self.registrants.mark_email_sent(registrant.id, self.clock())
        log.info("registration.confirmation_resent", id=registrant.id)

        return ResendResult(
            user=DeletedRegistrant(id=registrant.id, name=registrant.name, email=registrant.email)
        )

    async def send_reminders(self) -> ReminderResult:
        pending = await self.registrants.pending_reminders()
        if not pending:
            return ReminderResult(sentCount=0)

        sent, errors = 0, []
        for registrant in pending:
            try:
                await asyncio.to_thread(self.mailer.send_reminder, registrant.name, registrant.email)
            except Exception as e:
                log.warning("reminder.failed", id=registrant.id, email=registrant.email, error=str(e))
                errors.append(ReminderFailure(email=registrant.email, error=str(e)))
                continue
            await self.registrants.mark_reminder_sent(registrant.id, self.clock())
            sent += 1

        log.info("reminder.batch_processed", sent=sent, failed=len(errors))
        return ReminderResult(sentCount=sent, failedCount=len(errors), errors=errors)
