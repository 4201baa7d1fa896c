from __future__ import annotations
import re
from typing import Optional

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
PHONE_RUN_RE = re.compile(r"[+(\d][\d\s().+-]*")

MIN_PHONE_CHARS = 6
EMAIL_TRAILING = ".,;:!?)"


def extract_email(text: str) -> Optional[str]:
    m = EMAIL_RE.search(text or "")
    if not m:
        return None
    email = m.group(0).rstrip(EMAIL_TRAILING)
    # "name@host." loses its dot to the strip above
    return email if EMAIL_RE.fullmatch(email) else None


def extract_phone(text: str) -> Optional[str]:
    for m in PHONE_RUN_RE.finditer(text or ""):
        candidate = m.group(0).strip()
        significant = re.sub(r"\s", "", candidate)
        if len(significant) >= MIN_PHONE_CHARS and any(ch.isdigit() for ch in significant):
            return candidate
    return None


def extract_text(text: str) -> Optional[str]:
    cleaned = (text or "").strip()
    return cleaned or None


EXTRACTORS = {
    "email": extract_email,
    "phone": extract_phone,
    "name": extract_text,
    "industry": extract_text,
    "city": extract_text,
}


def extract(kind: str, text: str) -> Optional[str]:
    extractor = EXTRACTORS.get(kind)
    return extractor(text) if extractor else None
