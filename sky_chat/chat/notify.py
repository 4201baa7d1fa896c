from __future__ import annotations
import os
from twilio.rest import Client

from .state import LeadState


def send_owner_sms(message: str) -> None:
    sid = os.getenv("TWILIO_ACCOUNT_SID", "")
    token = os.getenv("TWILIO_AUTH_TOKEN", "")
    from_number = os.getenv("TWILIO_FROM_NUMBER", "")
    to_number = os.getenv("OWNER_MOBILE", "")

    if not (sid and token and from_number and to_number):
        return

    Client(sid, token).messages.create(body=message, from_=from_number, to=to_number)


def booking_summary(state: LeadState) -> str:
    return (
        "NEW DISCOVERY CALL (CHAT)\n"
        f"Name: {state.name}\nIndustry: {state.industry}\nCity: {state.city}\n"
        f"Phone: {state.phone}\nEmail: {state.email}\n"
        f"When: {state.appointment_label}"
    )
