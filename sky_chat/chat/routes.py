from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from sky_chat import config
from sky_chat.crm import save_turn
from sky_chat.db import get_db
from sky_chat.google_calendar import busy_times, create_event
from sky_chat.llm import OpenAIChat, UpstreamGenerationError

from .engine import ConversationEngine, Generate, TurnResult
from .locales import LocaleText, UnknownLocaleError, get_locale
from .notify import booking_summary, send_owner_sms
from .scheduling import APPT_MINUTES, slot_start
from .state import ConversationTurn, InvalidLeadStateError, LeadState

router = APIRouter()
logger = logging.getLogger("uvicorn.error")


def get_generator() -> Generate:
    return OpenAIChat()


def now_local() -> datetime:
    return datetime.now(tz=config.BOOKING_TIMEZONE)


def calendar_filter(locale: LocaleText) -> Optional[Callable]:
    calendar_id = config.GOOGLE_CALENDAR_ID
    if not calendar_id:
        return None
    candidates = [*locale.morning_slots.values(), *locale.afternoon_slots.values()]

    def taken(day: date):
        try:
            return busy_times(calendar_id, day, candidates, config.BOOKING_TIMEZONE)
        except Exception:
            # If Google is flaky, offer from the full grid
            logger.exception("GCAL: freebusy FAILED")
            return set()

    return taken


def error(status: int, message: str, **extra) -> JSONResponse:
    return JSONResponse({"error": message, **extra}, status_code=status)


def persist(db: Session, result: TurnResult, history: list[ConversationTurn], message: str, locale: str) -> LeadState:
    turns = [*history, ConversationTurn(text=message, is_user=True, timestamp=now_local())]
    turns += [ConversationTurn(text=seg, is_user=False, timestamp=now_local()) for seg in result.segments]
    try:
        lead = save_turn(db, result.lead_state, turns, locale=locale)
    except Exception:
        logger.exception("CRM: save_turn FAILED")
        db.rollback()
        return result.lead_state
    logger.info("CRM: saved %s", {"lead_id": lead.id, "stage": lead.stage})
    return replace(result.lead_state, lead_id=lead.id)


def on_confirmed(state: LeadState, locale: LocaleText) -> None:
    calendar_id = config.GOOGLE_CALENDAR_ID
    start = slot_start(state, locale, config.BOOKING_TIMEZONE)
    if calendar_id and start is not None:
        try:
            ev = create_event(
                calendar_id=calendar_id,
                start=start,
                end=start + timedelta(minutes=APPT_MINUTES),
                summary=f"Discovery call - {state.name} - {state.city}",
                description=booking_summary(state),
            )
            logger.info("GCAL: created event id=%s htmlLink=%s", ev.get("id"), ev.get("htmlLink"))
        except Exception:
            logger.exception("GCAL: create_event FAILED")

    try:
        send_owner_sms(booking_summary(state))
    except Exception:
        logger.exception("NOTIFY: send_owner_sms FAILED")


def handle_turn(payload: dict, locale_key: Optional[str], db: Session, generate: Generate):
    message = str(payload.get("message") or "")
    raw_state = payload.get("leadState", payload.get("userInfo"))

    try:
        locale = get_locale(locale_key or payload.get("locale"))
        state = LeadState.from_dict(raw_state)
    except (InvalidLeadStateError, UnknownLocaleError) as e:
        logger.warning("CHAT: rejected %s", {"error": str(e)})
        return error(422, str(e))

    raw_history = payload.get("conversationHistory")
    if not isinstance(raw_history, list):
        raw_history = []
    history = [ConversationTurn.from_dict(m) for m in raw_history if isinstance(m, dict)]
    logger.info("CHAT: turn %s", {"locale": locale.key, "stage": state.stage.value, "lead_id": state.lead_id})

    engine = ConversationEngine(
        locale,
        generate=generate,
        taken_slots=calendar_filter(locale),
        clock=now_local,
    )
    try:
        result = engine.run_turn(message, history, state)
    except UpstreamGenerationError as e:
        logger.error("CHAT: generation FAILED %s", {"error": str(e), "stage": state.stage.value})
        return error(
            502,
            "upstream_generation_failed",
            reply=locale.apology,
            leadState=raw_state if isinstance(raw_state, dict) else state.to_dict(),
        )

    updated = persist(db, result, history, message, locale.key)
    logger.info(
        "CHAT: reply %s",
        {"stage": updated.stage.value, "advanced": result.advanced, "segments": len(result.segments)},
    )

    if result.just_confirmed:
        on_confirmed(updated, locale)

    return {"reply": result.reply, "leadState": updated.to_dict()}


@router.post("")
def chat(payload: dict = Body(...), db: Session = Depends(get_db), generate: Generate = Depends(get_generator)):
    return handle_turn(payload, None, db, generate)


@router.post("/pt")
def chat_pt(payload: dict = Body(...), db: Session = Depends(get_db), generate: Generate = Depends(get_generator)):
    return handle_turn(payload, "pt", db, generate)
