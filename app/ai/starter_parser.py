"""
Parser for LLM-generated conversation starters.

The model is asked for a numbered list where each item holds one quoted
phrase followed by a short explanation. This module turns that free text
into ``{number, phrase, explanation, suggestedTag}`` items. Text without any
numbered marker parses to an empty list; callers show the raw text instead.
"""

import re

_MARKER_RE = re.compile(r"^(\d+)[.)]\s*(.*)")
_QUOTE_RE = re.compile(r'"([^"]+)"(.*)')
_LEADING_PUNCT_RE = re.compile(r"^[\s\-–—:]+")

# Order matters: first group with a matching keyword wins.
TAG_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("opener", ("open", "start", "hello", "hey", "morning")),
    ("objection", ("concern", "worry", "but", "pushback", "resist")),
    ("question", ("question", "ask", "what do you", "how do you", "?")),
    ("follow-up", ("follow", "check in", "circle back", "touch base")),
    ("empathy", ("understand", "hear you", "appreciate", "recognize", "feel")),
    ("motivation", ("excite", "opportunity", "benefit", "achieve", "success")),
    ("closing", ("next step", "commit", "agree", "move forward")),
]
DEFAULT_TAG = "opener"

TAG_LABELS = {
    "opener": "Opener",
    "objection": "Objection Handler",
    "closing": "Closing",
    "follow-up": "Follow-up",
    "question": "Question",
    "empathy": "Empathy",
    "motivation": "Motivation",
    "escalation": "Escalation",
}


def suggest_tag(phrase: str, explanation: str) -> str:
    """Keyword-match a starter to a script tag. Plain substring tests."""
    text = f"{phrase} {explanation}".lower()
    for tag, keywords in TAG_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return tag
    return DEFAULT_TAG


def _strip_leading_punct(text: str) -> str:
    return _LEADING_PUNCT_RE.sub("", text).strip()


def _finish(current: dict | None, out: list[dict]) -> None:
    if current and current["phrase"]:
        out.append({
            "number": current["number"],
            "phrase": current["phrase"],
            "explanation": current["explanation"],
            "suggestedTag": suggest_tag(current["phrase"], current["explanation"]),
        })


def parse_starters(text: str) -> list[dict]:
    starters: list[dict] = []
    current = None

    for line in (text or "").split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue

        marker = _MARKER_RE.match(trimmed)
        if marker:
            _finish(current, starters)
            content = marker.group(2)
            quoted = _QUOTE_RE.search(content)
            if quoted:
                current = {
                    "number": int(marker.group(1)),
                    "phrase": quoted.group(1),
                    "explanation": _strip_leading_punct(quoted.group(2)),
                }
            else:
                current = {"number": int(marker.group(1)), "phrase": content, "explanation": ""}
        elif current is not None:
            if current["explanation"]:
                current["explanation"] += " " + trimmed
            else:
                cleaned = _strip_leading_punct(trimmed)
                if cleaned:
                    current["explanation"] = cleaned

    _finish(current, starters)
    return starters
