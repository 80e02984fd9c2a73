# models.py

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Tuple


class Category(str, Enum):
    """The six readiness categories, in report order."""

    FINANCIAL = "financial"
    OWNER_DEPENDENCY = "owner_dependency"
    ASSETS = "assets"
    LEGAL = "legal"
    MARKETING = "marketing"
    PRESENTATION = "presentation"


class Domain(str, Enum):
    """Answer domains a question can be bound to."""

    TERNARY = "ternary"
    FIVE_POINT = "five_point"


TERNARY_TOKENS = ("yes", "no", "dont_know")
FIVE_POINT_TOKENS = ("excellent", "good", "average", "poor", "very_poor")

DOMAIN_TOKENS = {
    Domain.TERNARY: TERNARY_TOKENS,
    Domain.FIVE_POINT: FIVE_POINT_TOKENS,
}


class ConfigError(RuntimeError):
    """Raised when the static question / content tables disagree."""


class IncompleteAnswersError(ValueError):
    """Raised when a report is requested for a partial answer set and partial
    answers are not allowed."""

    def __init__(self, missing):
        self.missing = tuple(missing)
        super().__init__(
            f"{len(self.missing)} unanswered question(s): {', '.join(self.missing)}"
        )


@dataclass(frozen=True)
class Report:
    """
    Outcome of one completed questionnaire.

    Produced once by the synthesizer and never mutated; restarting the
    questionnaire produces a fresh report. The per-category mappings are
    read-only views, so the report is also hashable.
    """

    overall_score: int
    category_scores: Mapping[Category, float]
    verbal_assessment: str
    readiness_level: str
    category_analysis: Mapping[Category, str]
    recommendations: Tuple[str, ...]

    def __post_init__(self):
        object.__setattr__(
            self, "category_scores", MappingProxyType(dict(self.category_scores))
        )
        object.__setattr__(
            self, "category_analysis", MappingProxyType(dict(self.category_analysis))
        )
        object.__setattr__(self, "recommendations", tuple(self.recommendations))

    def __hash__(self):
        return hash(
            (
                self.overall_score,
                tuple(self.category_scores.items()),
                self.verbal_assessment,
                self.readiness_level,
                tuple(self.category_analysis.items()),
                self.recommendations,
            )
        )

    def to_dict(self):
        """
        Plain JSON-friendly representation (enum keys become their values).

        :return: a dict suitable for a dcc.Store
        """
        return {
            "overall_score": self.overall_score,
            "category_scores": {
                Category(c).value: float(v) for c, v in self.category_scores.items()
            },
            "verbal_assessment": self.verbal_assessment,
            "readiness_level": self.readiness_level,
            "category_analysis": {
                Category(c).value: t for c, t in self.category_analysis.items()
            },
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            overall_score=int(data["overall_score"]),
            category_scores={
                Category(c): float(v) for c, v in data["category_scores"].items()
            },
            verbal_assessment=data["verbal_assessment"],
            readiness_level=data["readiness_level"],
            category_analysis={
                Category(c): t for c, t in data["category_analysis"].items()
            },
            recommendations=tuple(data["recommendations"]),
        )
