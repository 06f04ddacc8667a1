from __future__ import annotations

import logging
from typing import Iterable

import Levenshtein

from .types import Client


logger = logging.getLogger(__name__)

EXACT_WEIGHT = 1.0
CONTAINS_WEIGHT = 0.85
DISTANCE_WEIGHT = 0.7
FIRST_TOKEN_BONUS = 0.1


def levenshtein(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def _normalize(value: str | None) -> str:
    return ' '.join(str(value or '').lower().split())


def score(candidate: str | None, query: str | None) -> float:
    """Similarity of two client names in [0, 1].

    Exact (case-insensitive) matches score 1.0 and containment either way
    scores 0.85. Anything else is scored from the edit distance, with a small
    bonus when both names start with the same word.
    """
    left = _normalize(candidate)
    right = _normalize(query)
    if not left or not right:
        return 0.0
    if left == right:
        return EXACT_WEIGHT
    if left in right or right in left:
        return CONTAINS_WEIGHT

    longest = max(len(left), len(right))
    value = DISTANCE_WEIGHT * (1 - levenshtein(left, right) / longest)
    if left.split()[0] == right.split()[0]:
        value += FIRST_TOKEN_BONUS
    return max(0.0, min(1.0, value))


def _location_matches(client: Client, location: str) -> bool:
    for prop in client.properties:
        known = _normalize(prop.location)
        if known and (known in location or location in known):
            return True
    return False


def suggest_client(
    clients: Iterable[Client],
    name: str | None,
    property_location: str | None = None,
    threshold: float = 0.6,
) -> Client | None:
    pool = list(clients)
    best: Client | None = None
    best_score = 0.0
    for client in pool:
        value = score(client.name, name)
        if value > best_score:
            best, best_score = client, value
    if best is not None and best_score >= threshold:
        logger.debug('Matched client %r with score %.2f', best.name, best_score)
        return best

    location = _normalize(property_location)
    if location:
        for client in pool:
            if _location_matches(client, location):
                logger.debug('Matched client %r by property location', client.name)
                return client
    return None
