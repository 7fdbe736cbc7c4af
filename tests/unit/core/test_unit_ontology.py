# tests/unit/core/test_unit_ontology.py - v1
"""Tests for core/ontology.py: vocabulary normalization and rule predicates."""

from __future__ import annotations

import pytest

from plexweave.core.ontology import (
    ARTIFACTS,
    CAPABILITIES,
    RELATIONSHIP_RULES,
    get_rule,
    normalize_artifacts,
    normalize_capabilities,
    normalize_domains,
    normalize_roles,
    normalize_token,
)
from plexweave.matching.matcher import evaluate_pair, find_candidates, initial_confidence


class TestNormalizeToken:
    def test_lowercases_and_trims(self):
        assert normalize_token("  Exposes API ") == "exposes_api"

    def test_hyphens_become_underscores(self):
        assert normalize_token("source-code") == "source_code"


class TestNormalizeArtifacts:
    def test_corrections_and_unknowns(self):
        assert normalize_artifacts(["configs", "api", "unknown_garbage"]) == [
            "configurations", "apis",
        ]

    def test_deduplicates_keeping_first(self):
        assert normalize_artifacts(["docs", "documents", "schemas", "schema"]) == [
            "documents", "schemas",
        ]

    def test_canonical_terms_pass_through(self):
        assert normalize_artifacts(list(ARTIFACTS)) == list(ARTIFACTS)


class TestNormalizeOtherVocabularies:
    def test_capabilities_drop_unknown(self):
        assert normalize_capabilities(["Analyzes", "flies", "detects-drift"]) == [
            "analyzes", "detects_drift",
        ]

    def test_capabilities_have_no_corrections(self):
        assert normalize_capabilities(["analyze"]) == []

    def test_domains(self):
        assert normalize_domains(["CI CD", "web apps", "cooking"]) == ["ci_cd", "web_apps"]

    def test_roles(self):
        assert normalize_roles(["Library", "library", "wizard"]) == ["library"]

    def test_empty_input(self):
        assert normalize_capabilities([]) == []

    def test_vocabulary_sizes(self):
        assert len(CAPABILITIES) == 20
        assert len(ARTIFACTS) == 18


class TestRelationshipRules:
    def test_eight_rules_in_order(self):
        assert [r.name for r in RELATIONSHIP_RULES] == [
            "analyzer_to_analyzable",
            "drift_detector_to_patterns",
            "validator_to_schemas",
            "generator_to_consumer",
            "library_to_application",
            "shared_domain",
            "orchestrator_to_tool",
            "transformer_chain",
        ]

    def test_only_drift_rule_has_bonus(self):
        bonuses = {r.name: r.bonus for r in RELATIONSHIP_RULES if r.bonus}
        assert bonuses == {"drift_detector_to_patterns": 0.1}

    def test_get_rule_unknown(self):
        with pytest.raises(KeyError):
            get_rule("nope")

    def test_hypothesis_text(self):
        rule = get_rule("validator_to_schemas")
        assert rule.hypothesis == (
            "validator_to_schemas: Validator can check schema-producing repos"
        )

    def test_analyzer_rule_is_directional(self, make_profile):
        analyzer = make_profile(
            "p/a", capabilities=("analyzes",), roles=("analyzer",),
        )
        producer = make_profile("p/b", produces=("components",), roles=("producer",))
        rule = get_rule("analyzer_to_analyzable")
        assert rule.matches(analyzer, producer)
        assert not rule.matches(producer, analyzer)

    def test_analyzer_rule_needs_analyzable_artifact(self, make_profile):
        analyzer = make_profile("p/a", capabilities=("analyzes",), roles=("analyzer",))
        docs = make_profile("p/b", produces=("documents",))
        assert not get_rule("analyzer_to_analyzable").matches(analyzer, docs)

    def test_generator_to_consumer(self, make_profile):
        gen = make_profile("p/a", capabilities=("generates",), produces=("schemas",))
        consumer = make_profile("p/b", consumes=("schemas",))
        assert get_rule("generator_to_consumer").matches(gen, consumer)

    def test_shared_domain_requires_role_not_held_by_target(self, make_profile):
        a = make_profile("p/a", domains=("testing",), roles=("library",))
        same = make_profile("p/b", domains=("testing",), roles=("library",))
        other = make_profile("p/c", domains=("testing",), roles=("application",))
        rule = get_rule("shared_domain")
        assert not rule.matches(a, same)
        assert rule.matches(a, other)

    def test_library_to_application(self, make_profile):
        lib = make_profile("p/a", roles=("library",), domains=("cli_tools",))
        app = make_profile("p/b", roles=("application",), domains=("cli_tools",))
        assert get_rule("library_to_application").matches(lib, app)
        assert not get_rule("library_to_application").matches(app, lib)

    def test_transformer_chain(self, make_profile):
        a = make_profile("p/a", capabilities=("transforms",), produces=("data",))
        b = make_profile("p/b", capabilities=("transforms",), consumes=("data",))
        assert get_rule("transformer_chain").matches(a, b)
        assert not get_rule("transformer_chain").matches(b, a)


# rule, source fields, target fields, fires on the reversed pair, initial confidence
RULE_CASES = [
    (
        "analyzer_to_analyzable",
        {"capabilities": ("analyzes",), "roles": ("analyzer",)},
        {"produces": ("components",), "roles": ("producer",)},
        False, 0.73,
    ),
    (
        "drift_detector_to_patterns",
        {"capabilities": ("detects_drift",)},
        {"produces": ("templates",), "roles": ("producer",)},
        False, 0.68,
    ),
    (
        "validator_to_schemas",
        {"capabilities": ("validates",)},
        {"produces": ("schemas",)},
        False, 0.58,
    ),
    (
        "generator_to_consumer",
        {"capabilities": ("generates",), "produces": ("schemas",)},
        {"consumes": ("schemas",)},
        False, 0.58,
    ),
    (
        "library_to_application",
        {"roles": ("library",), "domains": ("cli_tools",)},
        {"roles": ("application",), "domains": ("cli_tools",)},
        False, 0.63,
    ),
    (
        "shared_domain",
        {"roles": ("analyzer",), "domains": ("testing",)},
        {"roles": ("producer",), "domains": ("testing",)},
        True, 0.78,
    ),
    (
        "orchestrator_to_tool",
        {"capabilities": ("orchestrates",)},
        {"produces": ("tools",)},
        False, 0.58,
    ),
    (
        "transformer_chain",
        {"capabilities": ("transforms",), "produces": ("data",)},
        {"capabilities": ("transforms",), "consumes": ("data",)},
        False, 0.58,
    ),
]

# Cases where no other rule fires for the pair in either order
_SOLE_FIRING = [c for c in RULE_CASES if c[0] not in ("library_to_application", "shared_domain")]


def _pair(make_profile, source_fields, target_fields):
    return make_profile("p/src", **source_fields), make_profile("p/dst", **target_fields)


class TestEveryRuleBothOrders:
    def test_cases_cover_every_rule(self):
        assert {c[0] for c in RULE_CASES} == {r.name for r in RELATIONSHIP_RULES}

    @pytest.mark.parametrize(
        "rule_name, source_fields, target_fields, reverse_fires, confidence", RULE_CASES,
    )
    def test_rule_fires_per_direction(
        self, make_profile, rule_name, source_fields, target_fields, reverse_fires, confidence,
    ):
        source, target = _pair(make_profile, source_fields, target_fields)
        rule = get_rule(rule_name)
        assert rule.matches(source, target)
        assert rule.matches(target, source) is reverse_fires

        forward = {c.rule_name: c for c in evaluate_pair(source, target)}
        assert forward[rule_name].relationship_type == rule.relationship_type
        assert forward[rule_name].confidence == pytest.approx(confidence)
        assert (rule_name in {c.rule_name for c in evaluate_pair(target, source)}) is reverse_fires

    @pytest.mark.parametrize(
        "rule_name, source_fields, target_fields, reverse_fires, confidence", _SOLE_FIRING,
    )
    def test_found_whatever_the_input_order(
        self, make_profile, rule_name, source_fields, target_fields, reverse_fires, confidence,
    ):
        source, target = _pair(make_profile, source_fields, target_fields)
        for profiles in ([source, target], [target, source]):
            (candidate,) = find_candidates(profiles)
            assert candidate.rule_name == rule_name
            assert (candidate.source.repo_id, candidate.target.repo_id) == ("p/src", "p/dst")
            assert candidate.confidence == pytest.approx(confidence)

    def test_drift_bonus_lifts_confidence(self, make_profile):
        detector = make_profile("p/src", capabilities=("detects_drift",))
        producer = make_profile("p/dst", produces=("templates",), roles=("producer",))
        rule = get_rule("drift_detector_to_patterns")
        assert rule.bonus == 0.1
        without_bonus = initial_confidence(detector, producer, get_rule("validator_to_schemas"))
        assert initial_confidence(detector, producer, rule) == pytest.approx(without_bonus + 0.1)
