from __future__ import annotations
import math
import re
from typing import List

SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])\s+")

CHARS_PER_LINE = 50
MAX_LINES = 2


def line_cost(sentence: str) -> int:
    return math.ceil(len(sentence) / CHARS_PER_LINE)


def split_long_message(reply: str) -> List[str]:
    """Break a generated reply into chat-bubble sized pieces.

    Sentences are packed greedily until a bubble would pass two lines of about
    fifty characters. A sentence is never cut, so one long sentence still makes a
    single bubble. When everything fits in one bubble the reply comes back as is;
    a blank reply gives no bubbles at all.
    """
    segments: List[str] = []
    current = ""
    lines = 0

    for sentence in SENTENCE_SPLIT_RE.split(reply or ""):
        cost = line_cost(sentence)
        if lines + cost > MAX_LINES and current.strip():
            segments.append(current.strip())
            current = sentence
            lines = cost
        else:
            current += (" " if current else "") + sentence
            lines += cost

    if current.strip():
        segments.append(current.strip())

    if not segments:
        return []
    return segments if len(segments) > 1 else [reply]
