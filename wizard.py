# wizard.py

"""Questionnaire stepper state and its transitions. Every transition returns a new state."""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping, Optional

from config import QUESTIONS
from models import Report
from scoring import generate_report, missing_answers, round_half_up

TOTAL_QUESTIONS = len(QUESTIONS)
_KEYS = {q["key"] for q in QUESTIONS}


@dataclass(frozen=True)
class AssessmentState:
    index: int = 0
    answers: Mapping[str, str] = field(default_factory=dict)
    report: Optional[Report] = None

    def __post_init__(self):
        # read-only view; transitions copy the answers into a new state
        object.__setattr__(self, "answers", MappingProxyType(dict(self.answers)))

    def __hash__(self):
        return hash((self.index, tuple(sorted(self.answers.items())), self.report))

    @property
    def finished(self):
        return self.report is not None

    def to_dict(self):
        return {
            "index": self.index,
            "answers": dict(self.answers),
            "report": self.report.to_dict() if self.report else None,
        }

    @classmethod
    def from_dict(cls, data):
        """Rebuild a state from a dcc.Store payload; None gives a fresh state."""
        if not data:
            return cls()
        report = data.get("report")
        index = int(data.get("index", 0))
        return cls(
            index=min(max(index, 0), TOTAL_QUESTIONS - 1),
            answers={k: v for k, v in (data.get("answers") or {}).items() if k in _KEYS},
            report=Report.from_dict(report) if report else None,
        )


def restart():
    return AssessmentState()


def current_question(state):
    return QUESTIONS[state.index]


def select_answer(state, key, token):
    """
    Record an answer. Unknown question keys are rejected; the token itself is
    not checked here, scoring treats unknown tokens as 0.
    """
    if key not in _KEYS:
        raise KeyError(f"unknown question: {key}")
    answers = dict(state.answers)
    answers[key] = token
    return replace(state, answers=answers)


def advance(state, allow_partial=None):
    """Move to the next question; past the last one, finish the questionnaire."""
    if state.index < TOTAL_QUESTIONS - 1:
        return replace(state, index=state.index + 1)
    return finish(state, allow_partial=allow_partial)


def go_back(state):
    if state.index > 0:
        return replace(state, index=state.index - 1)
    return state


def finish(state, allow_partial=None):
    """
    Compute the report for the current answers, also when the user stops
    early. See scoring.generate_report for how partial answer sets are handled.
    """
    return replace(state, report=generate_report(state.answers, allow_partial=allow_partial))


def progress_percentage(state):
    return round_half_up((state.index + 1) / TOTAL_QUESTIONS * 100)


def answered_count(state):
    return TOTAL_QUESTIONS - len(missing_answers(state.answers))


def is_complete(state):
    return not missing_answers(state.answers)


def apply_event(state, trigger, allow_partial=None):
    """
    Route one stepper event to its transition.

    :param state: AssessmentState
    :param trigger: "prev", "next", "tick" (auto-advance timer), "finish",
        "restart" or ("answer", key, token)
    :return: (new state or None when nothing changes, arm auto-advance timer)
    :raises IncompleteAnswersError: finishing a partial answer set in strict mode
    """
    if trigger == "restart":
        return restart(), False
    if state.finished:
        return None, False
    if isinstance(trigger, tuple) and trigger[0] == "answer":
        _, key, token = trigger
        return select_answer(state, key, token), True
    if trigger == "prev":
        return go_back(state), False
    if trigger in ("next", "tick"):
        return advance(state, allow_partial=allow_partial), False
    if trigger == "finish":
        return finish(state, allow_partial=allow_partial), False
    raise ValueError(f"unknown stepper event: {trigger!r}")
