from __future__ import annotations
import random
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable, Collection, Iterable, List, Optional, Union

from .flow import next_state
from .instructions import build_instructions, build_messages
from .locales import LocaleText, get_locale
from .scheduling import propose_slots, target_day
from .segmenter import split_long_message
from .state import ConversationTurn, LeadState, Stage

Generate = Callable[[List[dict]], str]
TakenSlots = Callable[[date], Collection[time]]


@dataclass
class TurnResult:
    segments: List[str]
    lead_state: LeadState
    advanced: bool
    instructions: str

    @property
    def reply(self) -> Union[str, List[str]]:
        if not self.segments:
            return ""
        return self.segments if len(self.segments) > 1 else self.segments[0]

    @property
    def just_confirmed(self) -> bool:
        return self.advanced and self.lead_state.stage is Stage.CONFIRMED


class ConversationEngine:
    """Runs one visitor turn of the sales conversation.

    Holds configuration only. Everything about the visitor comes in with the
    ``LeadState`` and goes back out in the ``TurnResult``.
    """

    def __init__(
        self,
        locale: Union[str, LocaleText] = "en",
        generate: Optional[Generate] = None,
        taken_slots: Optional[TakenSlots] = None,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.locale = locale if isinstance(locale, LocaleText) else get_locale(locale)
        self.generate = generate
        self.taken_slots = taken_slots
        self.clock = clock or datetime.now
        self.rng = rng

    def ensure_slots(self, state: LeadState) -> LeadState:
        if Stage.parse(state.stage) is not Stage.BOOKING or state.proposed_slots:
            return state
        now = self.clock()
        taken = self.taken_slots(target_day(now)) if self.taken_slots else None
        return propose_slots(state, self.locale, now=now, taken=taken, rng=self.rng)

    def advance(self, state: LeadState, message: str) -> LeadState:
        updated = next_state(state, message, self.locale)
        return self.ensure_slots(updated)

    def run_turn(
        self,
        message: str,
        history: Iterable[ConversationTurn],
        state: LeadState,
    ) -> TurnResult:
        if self.generate is None:
            raise RuntimeError("ConversationEngine has no text generator")

        updated = self.advance(state, message)
        advanced = updated.stage is not Stage.parse(state.stage)
        # a hold on a stage that was asking for something means the answer missed
        retry = not advanced and not updated.stage.is_terminal and updated.stage is not Stage.EXPLAINING

        instructions = build_instructions(updated, self.locale, retry=retry)
        reply = self.generate(build_messages(instructions, history, message))

        return TurnResult(
            segments=split_long_message(reply),
            lead_state=updated,
            advanced=advanced,
            instructions=instructions,
        )
