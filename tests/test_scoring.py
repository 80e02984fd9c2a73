"""Unit tests for the readiness scoring pipeline in scoring.py.

Tests coverage:
- score_answer() - both answer domains and the zero default
- category_score() - fixed divisors, unanswered penalty
- synthesize() - overall score, tiers, narrative, recommendation gating
- generate_report() - end-to-end scenarios and the partial-answer policy
- validate_tables() - static table consistency
"""

import logging

import pytest

import config
import scoring
from config import (ANALYSIS, CATEGORY_QUESTIONS, GENERIC_RECS, QUESTIONS,
                    READY_RECS, RECS)
from models import Category, ConfigError, Domain, IncompleteAnswersError
from scoring import (category_score, category_scores, generate_report,
                     overall_from_categories, round_half_up, score_answer,
                     score_answers, synthesize, validate_tables, verbal_tier)


def _uniform(value):
    return {c: value for c in Category}


# =============================================================================
# Per-question scorer
# =============================================================================


@pytest.mark.parametrize("token,expected", [("yes", 5), ("no", 1), ("dont_know", 2)])
def test_ternary_scores(token, expected):
    assert score_answer(Domain.TERNARY, token) == expected


@pytest.mark.parametrize(
    "token,expected",
    [("excellent", 5), ("good", 4), ("average", 3), ("poor", 2), ("very_poor", 1)],
)
def test_five_point_scores(token, expected):
    assert score_answer(Domain.FIVE_POINT, token) == expected


def test_unknown_tokens_score_zero():
    assert score_answer(Domain.TERNARY, "") == 0
    assert score_answer(Domain.TERNARY, None) == 0
    assert score_answer(Domain.TERNARY, "excellent") == 0
    assert score_answer(Domain.FIVE_POINT, "yes") == 0


def test_unknown_token_is_logged_but_empty_is_not(caplog):
    with caplog.at_level(logging.WARNING, logger="scoring"):
        score_answer(Domain.TERNARY, "")
        assert caplog.records == []
        score_answer(Domain.TERNARY, "maybe")
    assert len(caplog.records) == 1
    assert "maybe" in caplog.records[0].getMessage()


def test_each_question_scores_its_own_answer(best_answers):
    answers = dict(best_answers, physical_assets="no")
    scores = score_answers(answers)
    assert scores["physical_assets"] == 1
    assert scores["intangible_assets"] == 5


def test_score_answers_covers_whole_catalog():
    scores = score_answers({})
    assert set(scores) == {q["key"] for q in QUESTIONS}
    assert set(scores.values()) == {0}


# =============================================================================
# Category aggregator
# =============================================================================


def test_category_bounds(best_answers):
    assert category_score(score_answers({}), Category.FINANCIAL) == 0
    assert category_score(score_answers(best_answers), Category.FINANCIAL) == 5
    assert category_score(score_answers(best_answers), Category.LEGAL) == 5


def test_unanswered_question_counts_in_divisor(best_answers):
    answers = dict(best_answers)
    del answers["cash_flow"]
    assert category_score(score_answers(answers), Category.FINANCIAL) == 15 / 4

    answers = dict(best_answers)
    del answers["licenses"]
    assert category_score(score_answers(answers), Category.LEGAL) == pytest.approx(10 / 3)


def test_category_scores_has_every_category():
    assert list(category_scores(score_answers({}))) == list(Category)


# =============================================================================
# Overall score and tiers
# =============================================================================


@pytest.mark.parametrize("mean,expected", [(1.0, 0), (5.0, 100), (3.0, 50)])
def test_overall_renormalization(mean, expected):
    assert overall_from_categories(_uniform(mean)) == expected


def test_overall_is_clamped_when_means_fall_below_one():
    assert overall_from_categories(_uniform(0.0)) == 0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(83.33) == 83


@pytest.mark.parametrize(
    "overall,level",
    [
        (100, "high"),
        (80, "high"),
        (79, "medium"),
        (60, "medium"),
        (59, "low – requires preparation"),
        (40, "low – requires preparation"),
        (39, "very low – requires significant work"),
        (0, "very low – requires significant work"),
    ],
)
def test_tier_boundaries(overall, level):
    assert verbal_tier(overall)[1] == level


def test_verbal_assessment_text():
    assert verbal_tier(80)[0] == "business ready at a high level for sale"
    assert verbal_tier(0)[0] == "business requires significant work before sale"


# =============================================================================
# Recommendations
# =============================================================================


def test_threshold_is_strict():
    at = synthesize({**_uniform(5.0), Category.MARKETING: 3.5})
    below = synthesize({**_uniform(5.0), Category.MARKETING: 3.49})
    assert not set(RECS[Category.MARKETING]) & set(at.recommendations)
    assert list(below.recommendations) == RECS[Category.MARKETING]


def test_generic_block_comes_first_and_blocks_follow_category_order():
    cats = _uniform(5.0)
    cats[Category.PRESENTATION] = 1.0
    cats[Category.FINANCIAL] = 1.0
    report = synthesize(cats)
    assert report.overall_score == 67
    assert list(report.recommendations) == (
        GENERIC_RECS + RECS[Category.FINANCIAL] + RECS[Category.PRESENTATION]
    )


def test_recommendations_are_not_deduplicated():
    report = synthesize(_uniform(1.0))
    assert len(report.recommendations) == 3 + 6 * 3


# =============================================================================
# Narrative
# =============================================================================


def test_analysis_picks_sentence_by_score(best_answers, worst_answers):
    best = generate_report(best_answers)
    worst = generate_report(worst_answers)
    keys = CATEGORY_QUESTIONS[Category.FINANCIAL]
    assert best.category_analysis[Category.FINANCIAL] == "\n".join(ANALYSIS[k][0] for k in keys)
    assert worst.category_analysis[Category.FINANCIAL] == "\n".join(ANALYSIS[k][2] for k in keys)


def test_middle_scores_get_cautionary_sentence(best_answers):
    answers = dict(best_answers, cash_flow="dont_know", owner_dependency="good")
    report = generate_report(answers)
    assert ANALYSIS["cash_flow"][1] in report.category_analysis[Category.FINANCIAL]
    assert ANALYSIS["owner_dependency"][1] in report.category_analysis[Category.OWNER_DEPENDENCY]


def test_synthesize_without_question_scores_uses_cautionary_sentences():
    report = synthesize(_uniform(5.0))
    lines = report.category_analysis[Category.LEGAL].split("\n")
    assert lines == [ANALYSIS[k][1] for k in CATEGORY_QUESTIONS[Category.LEGAL]]


def test_synthesize_is_deterministic(best_answers):
    scores = score_answers(dict(best_answers, crm_data="no"))
    cats = category_scores(scores)
    first = synthesize(cats, scores)
    second = synthesize(cats, scores)
    assert first == second
    assert first.to_dict() == second.to_dict()


# =============================================================================
# End-to-end scenarios
# =============================================================================


def test_all_most_positive(best_answers):
    report = generate_report(best_answers)
    assert all(v == 5.0 for v in report.category_scores.values())
    assert report.overall_score == 100
    assert report.readiness_level == "high"
    assert list(report.recommendations) == READY_RECS


def test_all_most_negative(worst_answers):
    report = generate_report(worst_answers)
    assert all(v == 1.0 for v in report.category_scores.values())
    assert report.overall_score == 0
    assert report.readiness_level == "very low – requires significant work"
    expected = list(GENERIC_RECS)
    for cat in Category:
        expected += RECS[cat]
    assert list(report.recommendations) == expected
    assert not set(READY_RECS) & set(report.recommendations)


def test_only_financials_failing(best_answers, worst_answers):
    answers = dict(best_answers)
    for key in CATEGORY_QUESTIONS[Category.FINANCIAL]:
        answers[key] = worst_answers[key]
    report = generate_report(answers)
    assert report.category_scores[Category.FINANCIAL] == 1.0
    assert report.overall_score == 83
    assert report.readiness_level == "high"
    # category gating is independent of the overall-score block
    assert list(report.recommendations) == RECS[Category.FINANCIAL]


def test_ready_message_when_every_category_at_threshold(best_answers):
    answers = dict(best_answers, cash_flow="dont_know", financing_ready="dont_know")
    report = generate_report(answers)
    assert report.category_scores[Category.FINANCIAL] == 3.5
    assert report.overall_score == 94
    assert list(report.recommendations) == READY_RECS


# =============================================================================
# Partial answer sets
# =============================================================================


def test_partial_answers_are_zero_filled_by_default():
    report = generate_report({}, allow_partial=True)
    assert report.overall_score == 0
    assert all(v == 0.0 for v in report.category_scores.values())
    assert len(report.recommendations) == 21


def test_partial_answers_rejected_when_disallowed(best_answers):
    answers = dict(best_answers)
    del answers["kpis_available"]
    with pytest.raises(IncompleteAnswersError) as err:
        generate_report(answers, allow_partial=False)
    assert err.value.missing == ("kpis_available",)


def test_partial_policy_follows_config(monkeypatch):
    monkeypatch.setattr(config, "ALLOW_PARTIAL_ANSWERS", False)
    with pytest.raises(IncompleteAnswersError):
        generate_report({"cash_flow": "yes"})


def test_complete_answers_pass_strict_mode(best_answers):
    assert generate_report(best_answers, allow_partial=False).overall_score == 100


# =============================================================================
# Table consistency
# =============================================================================


def test_shipped_tables_are_consistent():
    validate_tables()
    assert len(QUESTIONS) == scoring.EXPECTED_QUESTION_COUNT
    assert len(CATEGORY_QUESTIONS[Category.FINANCIAL]) == 4


def test_missing_question_is_fatal():
    with pytest.raises(ConfigError, match="expected 19 questions"):
        validate_tables(questions=QUESTIONS[:-1])


def test_orphan_question_is_fatal():
    membership = {c: list(keys) for c, keys in CATEGORY_QUESTIONS.items()}
    membership[Category.LEGAL].remove("licenses")
    with pytest.raises(ConfigError, match="legal"):
        validate_tables(membership=membership)


def test_option_outside_domain_is_fatal():
    questions = [dict(q) for q in QUESTIONS]
    questions[0]["options"] = [{"label": "Great", "value": "excellent"}]
    with pytest.raises(ConfigError, match="financial_statements"):
        validate_tables(questions=questions)


def test_missing_narrative_or_recommendations_is_fatal():
    analysis = dict(ANALYSIS)
    del analysis["crm_data"]
    with pytest.raises(ConfigError, match="crm_data"):
        validate_tables(analysis=analysis)

    recs = dict(RECS)
    recs[Category.ASSETS] = recs[Category.ASSETS][:2]
    with pytest.raises(ConfigError, match="assets"):
        validate_tables(recs=recs)


def test_plain_string_domain_is_accepted():
    questions = [dict(q) for q in QUESTIONS]
    questions[0]["domain"] = "ternary"
    validate_tables(questions=questions)


def test_unknown_domain_or_bad_option_reports_config_error():
    questions = [dict(q) for q in QUESTIONS]
    questions[0]["domain"] = "ternary"
    questions[0]["options"] = [{"label": "Great", "value": "excellent"}]
    questions[1]["domain"] = "likert"
    questions[2]["options"] = [{"label": "Yes"}]
    with pytest.raises(ConfigError) as err:
        validate_tables(questions=questions)
    message = str(err.value)
    assert "financial_statements: options ['excellent'] outside ternary" in message
    assert "unknown domain 'likert'" in message
    assert "options [None]" in message


@pytest.mark.parametrize("field", ["generic_recs", "ready_recs"])
@pytest.mark.parametrize("block", [[], ["only one"], ["a", "b", "c", "d"]])
def test_generic_and_ready_blocks_need_three_entries(field, block):
    with pytest.raises(ConfigError, match="need 3 entries"):
        validate_tables(**{field: block})


def test_generic_block_is_read_from_config(monkeypatch):
    monkeypatch.setattr(config, "GENERIC_RECS", [])
    with pytest.raises(ConfigError, match="generic recommendations"):
        validate_tables()


# =============================================================================
# Report immutability
# =============================================================================


def test_report_mappings_are_read_only(best_answers):
    report = generate_report(best_answers)
    with pytest.raises(TypeError):
        report.category_scores[Category.FINANCIAL] = 0.0
    with pytest.raises(TypeError):
        report.category_analysis[Category.LEGAL] = ""
    assert report.category_scores[Category.FINANCIAL] == 5.0


def test_report_does_not_share_caller_dicts():
    cats = _uniform(5.0)
    report = synthesize(cats)
    cats[Category.FINANCIAL] = 1.0
    assert report.category_scores[Category.FINANCIAL] == 5.0


def test_report_is_hashable_and_survives_store_round_trip(best_answers):
    report = generate_report(best_answers)
    again = type(report).from_dict(report.to_dict())
    assert again == report
    assert hash(again) == hash(report)
    assert len({report, again}) == 1
