from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from ..catalog.hours import time_in_window
from ..catalog.models import Deal, DealType, Event


def local_now(timezone: str, now: datetime | None = None) -> datetime:
    """Wall-clock time in ``timezone`` as a naive datetime. Naive inputs are taken as already local."""
    if now is None:
        now = datetime.now(ZoneInfo(timezone))
    elif now.tzinfo is None:
        return now
    return now.astimezone(ZoneInfo(timezone)).replace(tzinfo=None)


def deal_active_now(deal: Deal, now: datetime) -> bool:
    if not deal.is_active:
        return False
    if deal.days is not None and now.weekday() not in deal.days:
        return False
    if deal.start_time is not None and deal.end_time is not None:
        return time_in_window(now.time(), deal.start_time, deal.end_time)
    return True


def active_deals_now(deals: list[Deal], now: datetime) -> list[Deal]:
    return [d for d in deals if deal_active_now(d, now)]


def happy_hour_active(active_deals: list[Deal]) -> bool:
    return any(d.deal_type == DealType.happy_hour for d in active_deals)


def events_today(events: list[Event], now: datetime, timezone: str) -> list[Event]:
    today = now.date()
    matching = []
    for event in events:
        start = event.start_time
        if start.tzinfo is not None:
            start = start.astimezone(ZoneInfo(timezone))
        if start.date() == today:
            matching.append(event)
    return matching
