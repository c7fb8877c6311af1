"""
Regex helpers that pull business details out of free-text search snippets.

These are best-effort: a snippet may yield nothing, or something that only
looks like an opening time or a phone number.
"""

import re
from typing import Optional

_TIME = r"\d{1,2}(?::\d{2})?\s*(?:am|pm)?"

HOUR_PATTERNS = [
    # "mon-fri 9am - 5pm", "hours: sat 10 - 4"
    re.compile(rf"(?:hours?:?\s*)?(?:mon|tue|wed|thu|fri|sat|sun)[\s\w]*?({_TIME})\s*-\s*({_TIME})", re.IGNORECASE),
    # "open 8am - 9pm", "opens: 7 - 10"
    re.compile(rf"(?:open|opens?):?\s*({_TIME})\s*-\s*({_TIME})", re.IGNORECASE),
    # bare "9am - 5pm"
    re.compile(rf"({_TIME})\s*-\s*({_TIME})"),
]

LABELED_PHONE = re.compile(r"(?:phone|call|tel|contact):?\s*([(\d\s\-.)]{10,})", re.IGNORECASE)
PHONE_LABEL = re.compile(r"(?:phone|call|tel|contact):?\s*", re.IGNORECASE)
BARE_PHONE = re.compile(r"\(?(\d{3})\)?[-.\s]?(\d{3})[-.\s]?(\d{4})")

ADDRESS = re.compile(
    r"\d+\s+[A-Za-z\s]+(?:street|st|avenue|ave|road|rd|drive|dr|lane|ln|boulevard|blvd)"
    r"[^,\n]*(?:,\s*[A-Za-z\s]+(?:,\s*[A-Z]{2})?)*",
    re.IGNORECASE,
)


def extract_hours(text: str) -> Optional[str]:
    for pattern in HOUR_PATTERNS:
        matches = [m.group(0) for m in pattern.finditer(text)]
        if matches:
            return ", ".join(matches[:3])
    return None


def extract_phone(text: str) -> Optional[str]:
    m = LABELED_PHONE.search(text)
    if m:
        return PHONE_LABEL.sub("", m.group(0)).strip()

    m = BARE_PHONE.search(text)
    if m:
        return m.group(0)
    return None


def extract_address(text: str) -> Optional[str]:
    m = ADDRESS.search(text)
    if m:
        return m.group(0).strip()
    return None


def business_name_from_title(title: str) -> str:
    return title.split("-")[0].split("|")[0].strip()
