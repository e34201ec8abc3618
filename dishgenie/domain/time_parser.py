"""Free-text recipe durations to minutes.

Catalog timings look like "1 hour 30 minutes", "45 mins" or "1h 30m". Anything
we cannot read comes back as `UNBOUNDED` rather than zero: a dish with no timing
data should never be filtered out for being too slow.
"""

import math
import re


UNBOUNDED = math.inf

_QUANTITY = re.compile(r"^(\d+(?:\.\d+)?)(.*)$")


def _is_hours(unit: str) -> bool:
    return "hour" in unit or "hr" in unit or unit == "h"


def parse_minutes(duration: str | None) -> float:
    if not duration:
        return UNBOUNDED

    tokens = duration.lower().split()
    total = 0.0
    for i, token in enumerate(tokens):
        match = _QUANTITY.match(token)
        if match is None:
            continue
        value, unit = float(match.group(1)), match.group(2)
        if not unit and i + 1 < len(tokens):
            unit = tokens[i + 1]
        unit = unit.strip(".,;")
        # Minutes unless told otherwise.
        total += value * 60 if _is_hours(unit) else value

    minutes = round(total)
    return minutes if minutes > 0 else UNBOUNDED


def known_minutes(duration: str | None) -> int:
    """Minutes for summing legs: unknown counts as nothing."""
    minutes = parse_minutes(duration)
    return 0 if minutes == UNBOUNDED else int(minutes)
