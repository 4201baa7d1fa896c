from datetime import date, datetime, time
from unittest.mock import Mock

from conftest import TZ

from sky_chat.google_calendar import busy_times, create_event


def fake_service(busy):
    service = Mock()
    service.freebusy.return_value.query.return_value.execute.return_value = {
        "calendars": {"cal-1": {"busy": busy}}
    }
    return service


def test_busy_block_marks_overlapping_slots():
    service = fake_service([{"start": "2026-10-16T12:15:00Z", "end": "2026-10-16T13:00:00Z"}])
    # 12:15-13:00 UTC is 9:15-10:00 in Sao Paulo
    taken = busy_times("cal-1", date(2026, 10, 16), [time(9, 0), time(9, 30), time(10, 0)], TZ, service=service)

    assert taken == {time(9, 0), time(9, 30)}
    body = service.freebusy.return_value.query.call_args.kwargs["body"]
    assert body["items"] == [{"id": "cal-1"}]
    assert body["timeZone"] == "America/Sao_Paulo"


def test_free_day():
    taken = busy_times(" cal-1 ", date(2026, 10, 16), [time(14, 0)], TZ, service=fake_service([]))
    assert taken == set()


def test_create_event():
    service = Mock()
    service.events.return_value.insert.return_value.execute.return_value = {"id": "ev1"}
    start = datetime(2026, 10, 16, 15, 0, tzinfo=TZ)

    ev = create_event("cal-1", start, start.replace(minute=30), "Discovery call", "details", service=service)

    assert ev == {"id": "ev1"}
    kwargs = service.events.return_value.insert.call_args.kwargs
    assert kwargs["calendarId"] == "cal-1"
    assert kwargs["body"]["start"]["timeZone"] == "America/Sao_Paulo"
