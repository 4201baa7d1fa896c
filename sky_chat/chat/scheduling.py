from __future__ import annotations
import random
from dataclasses import replace
from datetime import date, datetime, time, timedelta
from typing import Collection, List, Optional
from zoneinfo import ZoneInfo

from .locales import LocaleText
from .state import LeadState

MIN_NOTICE = timedelta(hours=24)
APPT_MINUTES = 30


def target_day(now: datetime) -> date:
    return (now + MIN_NOTICE).date()


def date_label(day: date, locale: LocaleText) -> str:
    return locale.weekdays[day.weekday()]


def _eligible(pool: dict[str, time], taken: Collection[time]) -> List[str]:
    free = [label for label, t in pool.items() if t not in taken]
    # Nothing left after the calendar filter: offer the grid anyway
    return free or list(pool)


def propose_slots(
    state: LeadState,
    locale: LocaleText,
    now: Optional[datetime] = None,
    taken: Optional[Collection[time]] = None,
    rng: Optional[random.Random] = None,
) -> LeadState:
    """Attach one morning and one afternoon slot for the day after ``now``.

    A state that already carries proposed slots is returned unchanged, so the times
    the visitor was shown never move while the booking stage is parked.
    """
    if state.proposed_slots:
        return state

    now = now or datetime.now()
    rng = rng or random.Random()
    taken = taken or ()

    day = target_day(now)
    morning = rng.choice(_eligible(locale.morning_slots, taken))
    afternoon = rng.choice(_eligible(locale.afternoon_slots, taken))

    return replace(
        state,
        proposed_slots=[morning, afternoon],
        proposed_date_label=date_label(day, locale),
        proposed_date=day.isoformat(),
    )


def confirmed_slot(state: LeadState) -> Optional[str]:
    """Which of the proposed slots the appointment label ended up on."""
    if not state.appointment_label or not state.proposed_slots:
        return None
    for slot in state.proposed_slots:
        if state.appointment_label.endswith(f" {slot}"):
            return slot
    return None


def slot_start(state: LeadState, locale: LocaleText, tz: ZoneInfo) -> Optional[datetime]:
    slot = confirmed_slot(state)
    if slot is None or not state.proposed_date:
        return None
    t = locale.slot_time(slot)
    if t is None:
        return None
    return datetime.combine(date.fromisoformat(state.proposed_date), t, tzinfo=tz)

