from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class InvalidLeadStateError(ValueError):
    """The caller sent a lead state this engine cannot read."""


class InvalidStageError(InvalidLeadStateError):
    def __init__(self, value: Any):
        self.value = value
        super().__init__(f"Unknown conversation stage: {value!r}")


class Stage(str, Enum):
    GREETING = "greeting"
    ASKING_NAME = "asking_name"
    INDUSTRY = "industry"
    EXPLAINING = "explaining"
    PITCH_CALL = "pitch_call"
    COLLECTING_EMAIL = "collecting_email"
    COLLECTING_PHONE = "collecting_phone"
    COLLECTING_CITY = "collecting_city"
    BOOKING = "booking"
    CONFIRMED = "confirmed"

    @property
    def position(self) -> int:
        return STAGE_ORDER.index(self)

    @property
    def is_terminal(self) -> bool:
        return self is Stage.CONFIRMED

    @classmethod
    def parse(cls, value: Any) -> "Stage":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStageError(value) from None


STAGE_ORDER = list(Stage)


# wire name -> attribute name
_FIELDS = {
    "stage": "stage",
    "name": "name",
    "industry": "industry",
    "email": "email",
    "phone": "phone",
    "city": "city",
    "proposedSlots": "proposed_slots",
    "proposedDateLabel": "proposed_date_label",
    "proposedDate": "proposed_date",
    "appointmentLabel": "appointment_label",
    "leadId": "lead_id",
}
_TEXT_FIELDS = (
    "name",
    "industry",
    "email",
    "phone",
    "city",
    "proposed_date_label",
    "proposed_date",
    "appointment_label",
)


@dataclass
class LeadState:
    """Qualification progress for one visitor.

    The caller owns this value and sends it back on every turn; nothing here is
    remembered between requests.
    """

    stage: Stage = Stage.GREETING

    name: Optional[str] = None
    industry: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None

    proposed_slots: Optional[list[str]] = None
    proposed_date_label: Optional[str] = None
    proposed_date: Optional[str] = None
    appointment_label: Optional[str] = None

    lead_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "LeadState":
        """Read a caller-held state, rejecting anything of the wrong shape.

        A missing state starts a fresh conversation; an explicit ``null`` stage is
        rejected like any other unknown stage.
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise InvalidLeadStateError(f"Lead state must be an object, got {type(data).__name__}")

        kwargs: dict[str, Any] = {}
        for wire, attr in _FIELDS.items():
            key = wire if wire in data else attr
            if key not in data:
                continue
            value = data[key]
            if value is None:
                if attr == "stage":
                    raise InvalidStageError(None)
                continue
            kwargs[attr] = value

        kwargs["stage"] = Stage.parse(kwargs.get("stage", Stage.GREETING))

        slots = kwargs.get("proposed_slots")
        if slots is not None and not (isinstance(slots, list) and all(isinstance(s, str) for s in slots)):
            raise InvalidLeadStateError(f"proposedSlots must be a list of strings, got {slots!r}")
        for attr in _TEXT_FIELDS:
            if attr in kwargs and not isinstance(kwargs[attr], str):
                raise InvalidLeadStateError(f"{attr} must be a string, got {kwargs[attr]!r}")
        if "lead_id" in kwargs:
            kwargs["lead_id"] = str(kwargs["lead_id"])
        return cls(**kwargs)

    def to_dict(self) -> dict:
        out: dict[str, Any] = {}
        for wire, attr in _FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Stage):
                value = value.value
            elif isinstance(value, list):
                value = list(value)
            out[wire] = value
        return out


@dataclass
class ConversationTurn:
    text: str
    is_user: bool
    timestamp: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationTurn":
        ts = data.get("timestamp")
        if isinstance(ts, str):
            try:
                ts = datetime.fromisoformat(ts.replace("Z", "+00:00"))
            except ValueError:
                ts = None
        return cls(
            text=str(data.get("text") or ""),
            is_user=bool(data.get("isUser", data.get("is_user", False))),
            timestamp=ts if isinstance(ts, datetime) else None,
        )

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "isUser": self.is_user,
            "timestamp": self.timestamp.isoformat() if self.timestamp else None,
        }
