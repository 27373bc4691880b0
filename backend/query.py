"""
Search query tokenizer.

Turns free text like ``status:live org:acme prize:>10000 innovation`` into
structured filter values plus the leftover words used for substring search.
"""
import re

from backend.schemas import ParsedTokens

TOKEN_KEYS = {"status", "category", "difficulty", "mode", "organizer", "org", "tag", "prize"}
KEY_ALIASES = {"org": "organizer"}

PRIZE_PATTERN = re.compile(r"^(>=|<=|>|<|=)?(\d+)$")
DEFAULT_PRIZE_OP = ">="


def parse_prize(value: str):
    """
    Parse the value of a ``prize:`` token into ``(op, amount)``.
    Returns None when the value is not an optional operator followed by digits.
    """
    match = PRIZE_PATTERN.match(value.strip())
    if not match:
        return None
    op, digits = match.groups()
    return op or DEFAULT_PRIZE_OP, int(digits)


def tokenize(raw: str) -> ParsedTokens:
    tokens = ParsedTokens()
    text_parts = []

    for token in (raw or "").split():
        key, sep, value = token.partition(":")
        key = key.lower()
        if not sep or key not in TOKEN_KEYS:
            text_parts.append(token)
            continue

        if key == "prize":
            # Malformed amounts are dropped entirely; a later valid token replaces an earlier one.
            parsed = parse_prize(value)
            if parsed:
                tokens.prize_op, tokens.prize_val = parsed
            continue

        value = value.strip()
        if value:
            getattr(tokens, KEY_ALIASES.get(key, key)).append(value)

    tokens.text = " ".join(text_parts)
    return tokens
