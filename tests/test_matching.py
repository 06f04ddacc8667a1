from __future__ import annotations

import pytest

from inspectreport.matching import levenshtein, score, suggest_client
from inspectreport.types import Client


CLIENTS = [
    Client.model_validate(
        {'id': 'c1', 'name': 'Ahmed Al Balushi', 'properties': [{'id': 'p1', 'location': 'Villa 12, Al Mouj'}]}
    ),
    Client.model_validate({'id': 'c2', 'name': 'Fatma Al Said', 'properties': [{'id': 'p2', 'location': 'Bausher'}]}),
    Client.model_validate({'id': 'c3', 'name': 'John Smith'}),
]


def test_levenshtein():
    assert levenshtein('kitten', 'sitting') == 3
    assert levenshtein('', 'abc') == 3
    assert levenshtein('same', 'same') == 0


def test_score_weights():
    assert score('John Smith', 'john  smith') == 1.0
    assert score('John Smith', 'John') == 0.85
    assert score('John Smith', 'Jon Smith') == pytest.approx(0.7 * (1 - 1 / 10))
    assert score('Ahmed Ali', 'Ahmed Alli') == pytest.approx(0.7 * (1 - 1 / 10) + 0.1)
    assert score('', 'John') == 0.0


def test_suggest_client_by_name():
    match = suggest_client(CLIENTS, 'Fatma Al Saeed')
    assert match is not None and match.id == 'c2'


def test_suggest_client_falls_back_to_location():
    match = suggest_client(CLIENTS, 'Unknown Buyer', property_location='bausher')
    assert match is not None and match.id == 'c2'


def test_suggest_client_no_match():
    assert suggest_client(CLIENTS, 'Zzz') is None


def test_location_fallback_matches_containing_address():
    match = suggest_client(CLIENTS, 'Someone Else', property_location='Villa 12, Al Mouj, Muscat')
    assert match is not None and match.id == 'c1'
