"""Digest aggregation over the notification store."""

from collections import Counter
from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

import structlog

from core.clock import Clock, as_naive_utc, utcnow
from core.exceptions import AppException, InvalidDigestWindowError, ValidationError
from core.result import BatchResult
from domain.entities.digest import Digest, DigestPeriod
from domain.entities.notification import Notification
from domain.entities.preferences import DigestFrequency
from domain.repositories.unit_of_work import IUnitOfWork
from domain.services.transaction import bounded_uow

logger = structlog.get_logger()

DIGEST_WINDOWS = {
    DigestFrequency.DAILY: timedelta(hours=24),
    DigestFrequency.WEEKLY: timedelta(days=7),
}


def default_period(frequency: DigestFrequency, now: datetime) -> DigestPeriod:
    """``[now - window, now)`` for the frequency."""
    return DigestPeriod(start=now - DIGEST_WINDOWS[frequency], end=now)


def summarize(
    recipient_id: UUID,
    period: DigestPeriod,
    frequency: DigestFrequency,
    notifications: list[Notification],
    generated_at: datetime,
) -> Digest:
    """Group a window's notifications into a Digest."""
    ordered = tuple(sorted(notifications, key=lambda n: (n.created_at, str(n.id))))
    by_category: dict[str, list[Notification]] = {}
    for notification in ordered:
        by_category.setdefault(notification.category.value, []).append(notification)

    return Digest(
        recipient_id=recipient_id,
        period=period,
        frequency=frequency,
        notifications=ordered,
        delivery_schedule=period.end,
        generated_at=generated_at,
        by_category=by_category,
        counts_by_category={k: len(v) for k, v in by_category.items()},
        counts_by_priority=dict(Counter(n.priority.value for n in ordered)),
        unread_count=sum(1 for n in ordered if not n.is_read),
    )


class DigestService:
    """Builds windowed digests. A pure read: nothing is written.

    Building the same (recipient, period, frequency) twice yields the same
    notification set; adjacent half-open windows never share a notification.
    Sending a digest and remembering that it was sent belong to the caller.
    """

    def __init__(
        self,
        uow_factory: Callable[[], IUnitOfWork],
        clock: Clock = utcnow,
        store_timeout: float | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock
        self._store_timeout = store_timeout

    async def build_digest(
        self,
        recipient_id: UUID,
        frequency: DigestFrequency | str = DigestFrequency.DAILY,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> Digest:
        """Build the digest for ``[start, end)``.

        Missing bounds default from the frequency window: both missing means
        the window ending now, one missing is derived from the other.
        """
        try:
            frequency = DigestFrequency(frequency)
        except ValueError:
            raise ValidationError(
                f"Invalid digest frequency {frequency!r}; expected daily or weekly",
                field="frequency",
            ) from None

        period = self._resolve_period(frequency, start, end)
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            notifications = await uow.notifications.list_in_window(
                recipient_id, period.start, period.end
            )

        digest = summarize(recipient_id, period, frequency, notifications, self._clock())
        logger.info(
            "digest_built",
            recipient_id=str(recipient_id),
            frequency=frequency.value,
            period_start=period.start.isoformat(),
            period_end=period.end.isoformat(),
            notification_count=digest.total,
        )
        return digest

    async def run_scheduled_digests(
        self,
        frequency: DigestFrequency | str,
        now: datetime | None = None,
    ) -> tuple[list[Digest], BatchResult]:
        """Build the default-window digest for every opted-in recipient.

        Empty digests are skipped. A failure for one recipient is recorded
        and does not stop the run.
        """
        try:
            frequency = DigestFrequency(frequency)
        except ValueError:
            raise ValidationError(
                f"Invalid digest frequency {frequency!r}; expected daily or weekly",
                field="frequency",
            ) from None

        period = default_period(frequency, as_naive_utc(now) if now else self._clock())
        async with bounded_uow(self._uow_factory, self._store_timeout) as uow:
            recipients = await uow.preferences.list_digest_recipients(frequency)

        digests: list[Digest] = []
        result = BatchResult()
        for recipient_id in recipients:
            try:
                digest = await self.build_digest(
                    recipient_id, frequency, period.start, period.end
                )
            except AppException as exc:
                logger.warning(
                    "digest_build_failed",
                    recipient_id=str(recipient_id),
                    error_code=exc.error_code.value,
                )
                result.record_failure(str(recipient_id), exc.error_code.value, exc.message)
                continue
            if digest.total == 0:
                result.record_skip()
                continue
            digests.append(digest)
            result.record_success()

        logger.info(
            "digest_run_completed",
            frequency=frequency.value,
            recipients=result.total,
            built=result.succeeded,
            empty=result.skipped,
            failed=result.failed,
        )
        return digests, result

    def _resolve_period(
        self,
        frequency: DigestFrequency,
        start: datetime | None,
        end: datetime | None,
    ) -> DigestPeriod:
        window = DIGEST_WINDOWS[frequency]
        if start is None and end is None:
            return default_period(frequency, self._clock())

        if start is not None:
            start = as_naive_utc(start)
        if end is not None:
            end = as_naive_utc(end)
        if start is None:
            start = end - window  # type: ignore[operator]
        if end is None:
            end = start + window
        if end <= start:
            raise InvalidDigestWindowError(start.isoformat(), end.isoformat())
        return DigestPeriod(start=start, end=end)
