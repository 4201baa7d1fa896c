import os
import json
import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, Set
from zoneinfo import ZoneInfo

from google.oauth2 import service_account
from googleapiclient.discovery import build

logger = logging.getLogger("uvicorn.error")

SCOPES = ["https://www.googleapis.com/auth/calendar"]
SLOT_MINUTES = 30


def _svc():
    sa_json = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "").strip()
    sa_file = os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", "google_credentials.json").strip()

    if sa_json:
        info = json.loads(sa_json)
        creds = service_account.Credentials.from_service_account_info(info, scopes=SCOPES)
    else:
        creds = service_account.Credentials.from_service_account_file(sa_file, scopes=SCOPES)

    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def _parse(ts: str) -> datetime:
    return datetime.fromisoformat(ts.replace("Z", "+00:00"))


def busy_times(calendar_id: str, day: date, candidates: Iterable[time], tz: ZoneInfo, service=None) -> Set[time]:
    """Candidate start times on ``day`` whose slot overlaps a busy block."""
    calendar_id = calendar_id.strip()
    service = service or _svc()

    day_start = datetime.combine(day, time(0, 0), tzinfo=tz)
    body = {
        "timeMin": day_start.isoformat(),
        "timeMax": (day_start + timedelta(days=1)).isoformat(),
        "timeZone": str(tz),
        "items": [{"id": calendar_id}],
    }
    resp = service.freebusy().query(body=body).execute()
    busy = [
        (_parse(b["start"]), _parse(b["end"]))
        for b in resp["calendars"][calendar_id].get("busy", [])
    ]

    taken: Set[time] = set()
    for t in candidates:
        start = datetime.combine(day, t, tzinfo=tz)
        end = start + timedelta(minutes=SLOT_MINUTES)
        if any(b_start < end and start < b_end for b_start, b_end in busy):
            taken.add(t)

    logger.info("GCAL: busy check %s", {"day": day.isoformat(), "taken": sorted(t.isoformat() for t in taken)})
    return taken


def create_event(calendar_id: str, start: datetime, end: datetime, summary: str, description: str, service=None):
    calendar_id = calendar_id.strip()
    service = service or _svc()
    tz = str(start.tzinfo)
    event = {
        "summary": summary,
        "description": description,
        "start": {"dateTime": start.isoformat(), "timeZone": tz},
        "end": {"dateTime": end.isoformat(), "timeZone": tz},
    }
    return service.events().insert(calendarId=calendar_id, body=event).execute()
