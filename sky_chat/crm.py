from __future__ import annotations
from datetime import date
from typing import Iterable, List, Optional

from sqlalchemy import select, desc
from sqlalchemy.orm import Session

from .chat.state import ConversationTurn, LeadState, Stage
from .chat.scheduling import confirmed_slot
from .models import Appointment, Lead


def save_turn(
    db: Session,
    state: LeadState,
    history: Iterable[ConversationTurn],
    locale: str = "en",
) -> Lead:
    """Create or update the CRM record behind ``state.lead_id``.

    An unknown or missing id creates a new lead; the caller threads its id back
    into the state it hands to the visitor.
    """
    lead = db.get(Lead, state.lead_id) if state.lead_id else None
    if lead is None:
        lead = Lead(locale=locale)
        db.add(lead)

    for attr in ("name", "industry", "email", "phone", "city", "appointment_label"):
        value = getattr(state, attr)
        if value:
            setattr(lead, attr, value)
    lead.stage = Stage.parse(state.stage).value
    lead.conversation_history = [t.to_dict() for t in history]

    if lead.stage == Stage.CONFIRMED.value and lead.appointment_id is None:
        lead.appointment = build_appointment(state)

    db.commit()
    db.refresh(lead)
    return lead


def build_appointment(state: LeadState) -> Appointment:
    slot = confirmed_slot(state) or (state.appointment_label or "")
    day = date.fromisoformat(state.proposed_date) if state.proposed_date else None
    who = state.name or "Lead"
    return Appointment(
        title=f"Discovery call - {who}",
        date=day,
        start_time=slot,
        description=(
            f"Email: {state.email}\n"
            f"Phone: {state.phone}\n"
            f"Industry: {state.industry}\n"
            f"City: {state.city}\n"
            f"When: {state.appointment_label}\n"
        ),
    )


def list_leads(db: Session) -> List[Lead]:
    return list(db.scalars(select(Lead).order_by(desc(Lead.created_at))).all())


def get_lead(db: Session, lead_id: str) -> Optional[Lead]:
    return db.get(Lead, lead_id)
