import structlog

from collections import Counter
from datetime import timedelta

from models.registrant import RegistrantStatus
from schemas.registrant import (
    Statistics, Overview, Growth, StatusCount, DailyCount, RecentRegistration, PublicStats
)
from stores.registrants import RegistrantStore
from utils.dates import utcnow, local_midnight, local_date_string, months_ago


log = structlog.get_logger()

DAILY_WINDOW_DAYS = 30
RECENT_LIMIT = 10


class StatisticsService:
    """
    Registration statistics, recomputed from the store on every call.

    "Today" and the daily series follow the server-local calendar. The
    weekly and monthly growth numbers compare the window against everything
    outside it, not against the previous window of the same length.
    """

    def __init__(self, registrants: RegistrantStore, clock=utcnow):
        self.registrants = registrants
        self.clock = clock

    async def compute(self) -> Statistics:
        now = self.clock()
        today_start = local_midnight(now)
        yesterday_start = local_midnight(now, days_back=1)
        week_start = now - timedelta(days=7)
        month_start = months_ago(now, 1)

        total = await self.registrants.count()
        today = await self.registrants.count(since=today_start, until=now)
        yesterday = await self.registrants.count(since=yesterday_start, until=today_start)
        this_week = await self.registrants.count(since=week_start, until=now)
        this_month = await self.registrants.count(since=month_start, until=now)
        emails_sent = await self.registrants.count(emailSent=True)
        reminders_sent = await self.registrants.count(reminderSent=True)

        overview = Overview(
            total=total,
            today=today,
            yesterday=yesterday,
            thisWeek=this_week,
            thisMonth=this_month,
            emailsSent=emails_sent,
            remindersSent=reminders_sent,
            growth=Growth(
                daily=today - yesterday,
                weekly=this_week - (total - this_week),
                monthly=this_month - (total - this_month),
            ),
        )

        by_status = await self.registrants.count_by_status()
        daily = await self.daily_registrations(now)
        recent = await self.registrants.recent(RECENT_LIMIT)

        log.info("stats.computed", total=total, today=today)
        return Statistics(
            overview=overview,
            byStatus=[StatusCount(status=s, count=c) for s, c in sorted(by_status.items())],
            dailyRegistrations=daily,
            recentRegistrations=[
                RecentRegistration(
                    name=r.name,
                    email=r.email,
                    registrationDate=r.registrationDate,
                    status=r.status,
                )
                for r in recent
            ],
        )

    async def daily_registrations(self, now=None):
        now = now or self.clock()
        since = local_midnight(now, days_back=DAILY_WINDOW_DAYS)
        dates = await self.registrants.registration_dates(since, now)
        buckets = Counter(local_date_string(d) for d in dates)
        return [DailyCount(date=day, count=buckets[day]) for day in sorted(buckets)]

    async def public_stats(self) -> PublicStats:
        return PublicStats(
            totalRegistrations=await self.registrants.count(),
            confirmedAttendees=await self.registrants.count(status=RegistrantStatus.CONFIRMED.value),
            actualAttendees=await self.registrants.count(status=RegistrantStatus.ATTENDED.value),
        )
