"""
- HTTP call with clear fallback
Get N random digits (0..7) from random.org. If anything goes wrong (no internet,
timeout, bad response), fall back to a local secure random generator so a game
can always start.
"""

import logging
from secrets import randbelow
from typing import List

import requests

from . import config
from .errors import ExternalServiceUnavailable
from .types import Code, Difficulty, MAX_DIGIT, MIN_DIGIT, preset_for

logger = logging.getLogger(__name__)


def fetch_integers(count: int, minimum: int = MIN_DIGIT, maximum: int = MAX_DIGIT) -> List[int]:
    """
    Ask random.org for `count` integers in [minimum, maximum].
    Any problem at all is reported as ExternalServiceUnavailable.
    """
    params = {
        "num": count,
        "min": minimum,
        "max": maximum,
        "col": 1,          # one number per line
        "base": 10,
        "format": "plain",
        "rnd": "new",
    }

    try:
        response = requests.get(
            config.RANDOM_ORG_URL, params=params, timeout=config.RANDOM_TIMEOUT_SECONDS
        )
        response.raise_for_status()
    except requests.RequestException as e:
        raise ExternalServiceUnavailable(f"random.org request failed: {e}") from e

    # The body looks like:
    #   0\n3\n1\n2\n
    values = []
    for line in response.text.splitlines():
        text = line.strip()
        if text == "":
            continue
        try:
            values.append(int(text))
        except ValueError:
            raise ExternalServiceUnavailable(f"random.org sent a non-integer line: {text!r}") from None

    if len(values) != count:
        raise ExternalServiceUnavailable(f"random.org returned {len(values)} values, expected {count}.")

    for value in values:
        if value < minimum or value > maximum:
            raise ExternalServiceUnavailable(f"random.org number {value} out of range {minimum}..{maximum}.")

    return values


def fallback_code(length: int) -> Code:
    # randbelow(8) gives a number between 0 and 7; no I/O, can't fail
    return [randbelow(MAX_DIGIT + 1) for _ in range(length)]


def fetch_code(length: int = 4) -> Code:
    try:
        return fetch_integers(length)
    except Exception as e:
        logger.warning("Using backup random generator: %s", e)
        return fallback_code(length)


def generate_code(difficulty: Difficulty) -> Code:
    """Secret code sized for the difficulty."""
    return fetch_code(preset_for(difficulty).secret_length)
