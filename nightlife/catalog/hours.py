from __future__ import annotations

from datetime import datetime, time

from .models import Venue


def time_in_window(moment: time, start: time, end: time) -> bool:
    """``start <= moment < end``; a window whose end is not after its start wraps past midnight."""
    if start < end:
        return start <= moment < end
    return moment >= start or moment < end


def is_open_by_hours(venue: Venue, now: datetime) -> bool:
    """
    Open-now predicate driven by the venue's weekly hours.

    Late-night windows that started the previous day still count, so a bar
    open 20:00-02:00 on Friday is open at 01:00 on Saturday. Venues without
    hours are treated as closed.
    """
    today = now.weekday()
    yesterday = (today - 1) % 7
    moment = now.time()

    for window in venue.hours:
        wraps = window.close_time <= window.open_time
        if window.day == today:
            if wraps and moment >= window.open_time:
                return True
            if not wraps and window.open_time <= moment < window.close_time:
                return True
        elif window.day == yesterday and wraps and moment < window.close_time:
            return True
    return False
