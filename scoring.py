# scoring.py

"""
Business sale readiness scoring.

answers -> per-question scores -> category means -> report, each stage a pure
function of the previous one.

Unanswered or unrecognised answers score 0 and still count in the category
divisor, so a partial answer set produces a lower report instead of an
error. That is the product's behaviour, not a bug; set
ALLOW_PARTIAL_ANSWERS=false (or pass allow_partial=False) to reject partial
answer sets instead.
"""

import logging
import math

import config
from config import (ANALYSIS, CATEGORIES, CATEGORY_QUESTIONS, DOMAIN_SCORES,
                    GENERIC_RECS, GENERIC_RECS_BELOW, QUESTIONS, READY_RECS,
                    RECOMMENDATION_THRESHOLD, RECS, TIERS)
from models import (DOMAIN_TOKENS, Category, ConfigError, Domain,
                    IncompleteAnswersError, Report)

logger = logging.getLogger(__name__)

EXPECTED_QUESTION_COUNT = 19


def validate_tables(
    questions=QUESTIONS,
    membership=CATEGORY_QUESTIONS,
    analysis=ANALYSIS,
    recs=RECS,
    domain_scores=DOMAIN_SCORES,
    generic_recs=None,
    ready_recs=None,
):
    """
    Check the static tables in `config.py` against each other.

    Raises ConfigError listing every problem found. Called at import so a
    broken table stops the app from starting rather than failing per request.
    The generic and ready blocks default to the current config values.
    """
    if generic_recs is None:
        generic_recs = config.GENERIC_RECS
    if ready_recs is None:
        ready_recs = config.READY_RECS
    problems = []

    keys = [q.get("key") for q in questions]
    dupes = sorted({k for k in keys if keys.count(k) > 1})
    if dupes:
        problems.append(f"duplicate question keys: {dupes}")
    if len(questions) != EXPECTED_QUESTION_COUNT:
        problems.append(
            f"expected {EXPECTED_QUESTION_COUNT} questions, found {len(questions)}"
        )

    for q in questions:
        if q.get("category") not in CATEGORIES:
            problems.append(f"{q.get('key')}: unknown category {q.get('category')!r}")
        try:
            domain = Domain(q.get("domain"))
        except ValueError:
            problems.append(f"{q.get('key')}: unknown domain {q.get('domain')!r}")
            continue
        bad = [
            o.get("value")
            for o in q.get("options", [])
            if o.get("value") not in DOMAIN_TOKENS[domain]
        ]
        if bad or not q.get("options"):
            problems.append(f"{q.get('key')}: options {bad or '[]'} outside {domain.value}")
        triplet = analysis.get(q.get("key"))
        if not triplet or len(triplet) != 3:
            problems.append(f"{q.get('key')}: analysis needs 3 sentences")

    for domain, tokens in DOMAIN_TOKENS.items():
        if set(domain_scores.get(domain, {})) != set(tokens):
            problems.append(f"score table for {domain.value} does not cover {tokens}")

    by_category = {}
    for q in questions:
        by_category.setdefault(q.get("category"), []).append(q.get("key"))
    members = set()
    for cat in CATEGORIES:
        listed = list(membership.get(cat, []))
        members.update(listed)
        if not 3 <= len(listed) <= 4:
            problems.append(f"{cat.value}: owns {len(listed)} questions")
        if sorted(listed) != sorted(by_category.get(cat, [])):
            problems.append(f"{cat.value}: membership disagrees with question catalog")
        if len(recs.get(cat, [])) != 3:
            problems.append(f"{cat.value}: needs 3 recommendations")
    orphans = [k for k in keys if k not in members]
    if orphans:
        problems.append(f"questions in no category: {orphans}")
    if len(generic_recs) != 3:
        problems.append("generic recommendations need 3 entries")
    if len(ready_recs) != 3:
        problems.append("ready recommendations need 3 entries")

    if problems:
        raise ConfigError("; ".join(problems))


validate_tables()

_QUESTION_DOMAIN = {q["key"]: q["domain"] for q in QUESTIONS}


def round_half_up(x):
    """Round .5 away from zero for positive numbers (2.5 -> 3, not 2)."""
    return int(math.floor(x + 0.5))


def score_answer(domain, token):
    """
    Map one answer token to its score.

    ternary:    yes -> 5, no -> 1, dont_know -> 2
    five-point: excellent -> 5 ... very_poor -> 1
    anything else (empty included) -> 0

    :param domain: a Domain
    :param token: the selected option token
    :return: integer score 0-5
    """
    score = DOMAIN_SCORES[Domain(domain)].get(token)
    if score is None:
        if token:
            logger.warning(
                "Unrecognised answer %r for %s domain; scoring 0", token, Domain(domain).value
            )
        return 0
    return score


def score_answers(answers):
    """Score every catalog question from its own answer. Missing keys score 0."""
    answers = answers or {}
    return {
        key: score_answer(domain, answers.get(key, ""))
        for key, domain in _QUESTION_DOMAIN.items()
    }


def category_score(scores, category):
    """
    Mean of a category's question scores.

    Divides by the fixed member count, so a missing or 0 score drags the mean
    down instead of being left out.
    """
    members = CATEGORY_QUESTIONS[Category(category)]
    return sum(scores.get(k, 0) for k in members) / len(members)


def category_scores(scores):
    return {cat: category_score(scores, cat) for cat in CATEGORIES}


def overall_from_categories(cat_scores):
    """
    Renormalize the 1-5 mean of the category means onto 0-100 (1 -> 0,
    5 -> 100). Clamped because unanswered questions can push a mean below 1.
    """
    mean = sum(cat_scores.get(c, 0.0) for c in CATEGORIES) / len(CATEGORIES)
    return min(100, max(0, round_half_up((mean - 1) * 25)))


def verbal_tier(overall):
    """
    :param overall: overall score 0-100
    :return: (verbal_assessment, readiness_level)
    """
    for floor, verbal, level in TIERS:
        if overall >= floor:
            return verbal, level
    return TIERS[-1][1], TIERS[-1][2]


def _sentence(key, score):
    positive, partial, negative = ANALYSIS[key]
    if score == 5:
        return positive
    if score == 1:
        return negative
    return partial


def category_analysis(scores):
    return {
        cat: "\n".join(_sentence(k, scores.get(k, 0)) for k in CATEGORY_QUESTIONS[cat])
        for cat in CATEGORIES
    }


def build_recommendations(overall, cat_scores):
    """
    Ordered, not deduplicated: the generic block (overall below 80), then
    each weak category's block in category order.

    The "ready" block only appears when nothing else was added, which needs
    overall >= 80 and every category at or above the threshold.
    """
    recs = []
    if overall < GENERIC_RECS_BELOW:
        recs.extend(GENERIC_RECS)
    for cat in CATEGORIES:
        if cat_scores.get(cat, 0.0) < RECOMMENDATION_THRESHOLD:
            recs.extend(RECS[cat])
    if not recs:
        recs.extend(READY_RECS)
    return recs


def synthesize(cat_scores, scores=None):
    """
    Build the report from category means.

    Args:
        cat_scores (dict): Category -> mean score
        scores (dict, optional): question key -> score, used for the
            per-category narrative. Omitted questions read as unanswered.

    Returns:
        Report
    """
    cat_scores = {Category(c): float(v) for c, v in cat_scores.items()}
    overall = overall_from_categories(cat_scores)
    verbal, level = verbal_tier(overall)
    return Report(
        overall_score=overall,
        category_scores={c: cat_scores.get(c, 0.0) for c in CATEGORIES},
        verbal_assessment=verbal,
        readiness_level=level,
        category_analysis=category_analysis(scores or {}),
        recommendations=tuple(build_recommendations(overall, cat_scores)),
    )


def missing_answers(answers):
    answers = answers or {}
    return [q["key"] for q in QUESTIONS if not answers.get(q["key"])]


def generate_report(answers, allow_partial=None):
    """
    Run the whole pipeline on an answer set.

    :param answers: question key -> option token
    :param allow_partial: zero-fill unanswered questions; defaults to
        config.ALLOW_PARTIAL_ANSWERS
    :raises IncompleteAnswersError: when answers are missing and partial
        answer sets are not allowed
    """
    if allow_partial is None:
        allow_partial = config.ALLOW_PARTIAL_ANSWERS
    missing = missing_answers(answers)
    if missing:
        if not allow_partial:
            raise IncompleteAnswersError(missing)
        logger.info("Scoring partial answer set: %d question(s) unanswered", len(missing))
    scores = score_answers(answers)
    return synthesize(category_scores(scores), scores)
