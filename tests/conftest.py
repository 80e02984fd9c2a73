"""Pytest configuration and fixtures."""

import pytest

from config import QUESTIONS
from models import Domain

BEST = {Domain.TERNARY: "yes", Domain.FIVE_POINT: "excellent"}
WORST = {Domain.TERNARY: "no", Domain.FIVE_POINT: "very_poor"}


@pytest.fixture
def best_answers():
    """Most positive option for every question."""
    return {q["key"]: BEST[q["domain"]] for q in QUESTIONS}


@pytest.fixture
def worst_answers():
    """Most negative option for every question."""
    return {q["key"]: WORST[q["domain"]] for q in QUESTIONS}
