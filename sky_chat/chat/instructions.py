from __future__ import annotations
import json
from typing import Iterable, List

from .locales import LocaleText
from .state import ConversationTurn, LeadState, Stage


def _placeholders(state: LeadState, locale: LocaleText) -> dict:
    slots = state.proposed_slots or list(locale.default_slots)
    slot_a = slots[0] if slots else locale.default_slots[0]
    slot_b = slots[1] if len(slots) > 1 else locale.default_slots[1]
    return {
        "name": state.name or "",
        "industry": state.industry or "",
        "date_label": state.proposed_date_label or locale.default_date_label,
        "slot_a": slot_a,
        "slot_b": slot_b,
        "slots": f"{slot_a}, {slot_b}",
        "appointment": state.appointment_label or locale.default_appointment,
    }


def build_instructions(state: LeadState, locale: LocaleText, retry: bool = False) -> str:
    """System prompt for the reply to the visitor's latest message.

    ``retry`` adds the locale's re-ask note for the stage, used when the last
    message didn't give the stage what it was waiting for.
    """
    stage = Stage.parse(state.stage)
    user_info = json.dumps(state.to_dict(), ensure_ascii=False)

    parts = [
        locale.preamble.format(user_info=user_info),
        locale.directives[stage].format_map(_placeholders(state, locale)),
    ]
    if stage is Stage.PITCH_CALL and state.name and len(state.name.split()) < 2:
        parts.append(locale.ask_surname)
    if retry and stage in locale.retry_notes:
        parts.append(locale.retry_notes[stage])
    return "\n\n".join(parts)


def build_messages(instructions: str, history: Iterable[ConversationTurn], message: str) -> List[dict]:
    messages = [{"role": "system", "content": instructions}]
    for turn in history:
        messages.append({"role": "user" if turn.is_user else "assistant", "content": turn.text})
    messages.append({"role": "user", "content": message})
    return messages
