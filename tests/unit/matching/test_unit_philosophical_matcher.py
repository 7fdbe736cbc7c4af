# tests/unit/matching/test_unit_philosophical_matcher.py - v1
"""Tests for matching/philosophical_matcher.py."""

from __future__ import annotations

import pytest

from plexweave.matching.philosophical_matcher import (
    evaluate_pair,
    find_philosophical_matches,
    render_philosophical_integration,
)


class TestFindPhilosophicalMatches:
    def test_anti_entropy_only(self, make_stance):
        a = make_stance(
            "p/a", antagonist="complexity", epistemology="empirical", confidence=0.8,
        )
        b = make_stance(
            "p/b", antagonist="inconsistency", epistemology="formal", confidence=0.6,
        )
        matches = find_philosophical_matches([a, b])
        assert len(matches) == 1
        match = matches[0]
        assert match.match_type == "anti_entropy_alignment"
        assert match.confidence == pytest.approx(0.65 * 0.7)
        assert match.source.repo_id == "p/a"
        assert "source targets complexity, target targets inconsistency" in (
            match.integration_hypothesis
        )

    def test_vertical_beats_shared_antagonist(self, make_stance):
        a = make_stance("p/a", antagonist="ambiguity", abstraction_level="data")
        b = make_stance("p/b", antagonist="ambiguity", abstraction_level="philosophy")
        raw = evaluate_pair(a, b)
        assert [m.match_type for m in raw] == [
            "shared_antagonist", "vertical_alignment", "epistemological_kin",
        ]
        best = find_philosophical_matches([a, b])
        assert len(best) == 1
        assert best[0].match_type == "vertical_alignment"
        assert best[0].confidence == pytest.approx(0.8 * 0.8)

    def test_reveal_enforce(self, make_stance):
        a = make_stance(
            "p/a", antagonist="ambiguity", epistemology="empirical",
            cognitive_transform="reveals",
        )
        b = make_stance(
            "p/b", antagonist="rigidity", epistemology="formal",
            cognitive_transform="enforces",
        )
        matches = find_philosophical_matches([a, b])
        assert [m.match_type for m in matches] == ["reveal_enforce_pair"]

    def test_no_alignment(self, make_stance):
        a = make_stance("p/a", antagonist="ambiguity", epistemology="empirical")
        b = make_stance("p/b", antagonist="rigidity", epistemology="formal")
        assert find_philosophical_matches([a, b]) == []

    def test_one_match_per_pair(self, make_stance):
        stances = [make_stance(f"p/{n}") for n in "abcd"]
        matches = find_philosophical_matches(stances)
        assert len(matches) == 6
        assert len({m.pair_key for m in matches}) == 6


class TestRender:
    def _match(self, make_stance, match_type, **kwargs):
        a = make_stance("p/a", **kwargs.get("a", {}))
        b = make_stance("p/b", **kwargs.get("b", {}))
        return next(m for m in evaluate_pair(a, b) if m.match_type == match_type)

    def test_vertical(self, make_stance):
        match = self._match(
            make_stance, "vertical_alignment",
            a={"antagonist": "complexity", "abstraction_level": "data"},
            b={"antagonist": "complexity", "abstraction_level": "architecture"},
        )
        text = render_philosophical_integration(match, "alpha", "beta")
        assert text.startswith("## Vertical Alignment Opportunity")
        assert "**alpha** addresses complexity at the **data** level." in text
        assert "multi-scale anti-complexity system" in text

    def test_anti_entropy(self, make_stance):
        match = self._match(
            make_stance, "anti_entropy_alignment",
            a={"antagonist": "complexity", "core_virtue": "simplicity"},
            b={"antagonist": "entropy", "core_virtue": "order"},
        )
        text = render_philosophical_integration(match, "alpha", "beta")
        assert text.startswith("## Anti-Entropy Alignment Opportunity")
        assert "**Philosophy:** simplicity + order = comprehensive anti-entropy" in text

    def test_reveal_enforce_names_roles(self, make_stance):
        match = self._match(
            make_stance, "reveal_enforce_pair",
            a={"cognitive_transform": "enforces"},
            b={"cognitive_transform": "reveals"},
        )
        text = render_philosophical_integration(match, "alpha", "beta")
        assert "- **Revealer**: beta" in text
        assert "- **Enforcer**: alpha" in text

    def test_epistemological_kin(self, make_stance):
        match = self._match(make_stance, "epistemological_kin")
        text = render_philosophical_integration(match, "alpha", "beta")
        assert text.startswith("## Epistemological Kinship")
        assert "**pragmatic** epistemology" in text

    def test_shared_antagonist_fallback(self, make_stance):
        match = self._match(make_stance, "shared_antagonist")
        text = render_philosophical_integration(match, "alpha", "beta")
        assert text.startswith("## Shared Antagonist: ambiguity")
        assert "anti-ambiguity toolkit" in text
