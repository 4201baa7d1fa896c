from __future__ import annotations
import re
from dataclasses import replace
from typing import Callable, Dict, Optional

from .extractors import extract_email, extract_phone, extract_text
from .locales import LocaleText
from .state import LeadState, Stage


def normalize(text: str) -> str:
    return re.sub(r"\s+", " ", (text or "").strip().lower())


def is_affirmative(text: str, locale: LocaleText) -> bool:
    t = normalize(text)
    return any(re.search(rf"\b{re.escape(k)}\b", t) for k in locale.affirmatives)


def picked_slot(text: str, slots: Optional[list[str]]) -> Optional[str]:
    # "9h" must not match inside "9h30" or "19h"
    t = normalize(text)
    for slot in slots or []:
        if re.search(rf"(?<![\w:]){re.escape(slot.lower())}(?!\w)", t):
            return slot
    return None


def _greeting(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    return replace(state, stage=Stage.ASKING_NAME)


def _asking_name(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    if state.name:
        return replace(state, stage=Stage.INDUSTRY)
    name = extract_text(msg)
    if not name:
        return state
    return replace(state, name=name, stage=Stage.INDUSTRY)


def _industry(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    industry = extract_text(msg)
    if not industry:
        return state
    return replace(state, industry=state.industry or industry, stage=Stage.EXPLAINING)


def _explaining(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    # objections keep us here; the directive handles them
    if is_affirmative(msg, locale):
        return replace(state, stage=Stage.PITCH_CALL)
    return state


def _pitch_call(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    if state.name and len(state.name.split()) < 2:
        surname = extract_text(msg)
        if not surname:
            return state
        return replace(state, name=f"{state.name} {surname}", stage=Stage.COLLECTING_EMAIL)
    return replace(state, stage=Stage.COLLECTING_EMAIL)


def _collecting_email(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    email = extract_email(msg)
    if not email:
        return state
    return replace(state, email=email, stage=Stage.COLLECTING_PHONE)


def _collecting_phone(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    phone = extract_phone(msg)
    if not phone:
        return state
    return replace(state, phone=phone, stage=Stage.COLLECTING_CITY)


def _collecting_city(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    city = extract_text(msg)
    if not city:
        return state
    return replace(state, city=city, stage=Stage.BOOKING)


def _booking(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    slot = picked_slot(msg, state.proposed_slots)
    if not slot:
        return state
    day = state.proposed_date_label or locale.default_date_label
    return replace(
        state,
        appointment_label=f"{day} {locale.at_word} {slot}",
        stage=Stage.CONFIRMED,
    )


def _confirmed(state: LeadState, msg: str, locale: LocaleText) -> LeadState:
    return state


Transition = Callable[[LeadState, str, LocaleText], LeadState]

TRANSITIONS: Dict[Stage, Transition] = {
    Stage.GREETING: _greeting,
    Stage.ASKING_NAME: _asking_name,
    Stage.INDUSTRY: _industry,
    Stage.EXPLAINING: _explaining,
    Stage.PITCH_CALL: _pitch_call,
    Stage.COLLECTING_EMAIL: _collecting_email,
    Stage.COLLECTING_PHONE: _collecting_phone,
    Stage.COLLECTING_CITY: _collecting_city,
    Stage.BOOKING: _booking,
    Stage.CONFIRMED: _confirmed,
}

_missing = set(Stage) - set(TRANSITIONS)
if _missing:
    raise RuntimeError(f"No transition for stages: {sorted(s.value for s in _missing)}")


def next_state(state: LeadState, message: str, locale: LocaleText) -> LeadState:
    """Apply the visitor's message to the lead and return the updated lead.

    The input is never modified. A message that doesn't yield what the current
    stage is waiting for returns the same state, and the next reply asks again.
    """
    stage = Stage.parse(state.stage)
    updated = TRANSITIONS[stage](replace(state, stage=stage), message or "", locale)
    if updated.stage.position < stage.position:
        raise RuntimeError(f"Stage went backwards: {stage.value} -> {updated.stage.value}")
    return updated
