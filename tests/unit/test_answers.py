"""Unit tests for answer pool construction."""

import random

import pytest

from eightball.core.answers import (
    COMMUNITY_TEMPLATES,
    GENERIC_ANSWERS,
    build_community_pool,
    build_pool,
)
from eightball.core.models import CommunityMetadata, CommunityRule


def _metadata(subscribers=None, rules=()):
    return CommunityMetadata(
        community_id="cats",
        display_name="cats",
        subscriber_count=subscribers,
        rules=[CommunityRule(short_name=name) for name in rules],
    )


class TestGenericPool:
    """Pool without community metadata."""

    def test_twenty_canonical_answers(self):
        """No metadata returns the 20 generic answers in order."""
        pool = build_pool(None)

        assert pool == list(GENERIC_ANSWERS)
        assert len(pool) == 20
        assert pool[0] == "It is certain"
        assert pool[-1] == "Signs point to yes"

    def test_repeated_calls_are_identical(self):
        """Two calls return equal, independent lists."""
        first = build_pool(None)
        second = build_pool(None)

        assert first == second
        first.append("mutated")
        assert build_pool(None) == second

    def test_every_answer_is_printable(self):
        assert all(answer.strip() and answer.isprintable() for answer in build_pool(None))


class TestCommunityPool:
    """Pool flavored with community metadata."""

    def test_templates_then_generic_tail(self):
        """Community phrases come first, the first five generic ones last."""
        pool = build_pool(_metadata())

        assert len(pool) == len(COMMUNITY_TEMPLATES) + 5
        assert pool[0] == "The mods of r/cats say yes"
        assert pool[len(COMMUNITY_TEMPLATES) - 1] == "The r/cats algorithm predicts: Likely"
        assert pool[-5:] == list(GENERIC_ANSWERS[:5])

    def test_display_name_is_templated(self):
        metadata = CommunityMetadata(community_id="aww", display_name="Aww")

        assert "The r/Aww community believes so" in build_pool(metadata)

    def test_deterministic_with_fixed_rule_index(self, sample_metadata):
        """Same metadata and rule index give the same ordered pool."""
        assert build_pool(sample_metadata, rule_index=2) == build_pool(
            sample_metadata, rule_index=2
        )

    def test_full_layout(self, sample_metadata):
        """Templates, subscriber bonus, rule phrases, generic tail."""
        pool = build_pool(sample_metadata, rule_index=2)

        assert len(pool) == len(COMMUNITY_TEMPLATES) + 1 + 2 + 5
        assert pool[30:33] == [
            "All 5k r/python members agree",
            "Check rule 2 of r/python",
            "The r/python rules are clear on this",
        ]


class TestSubscriberThresholds:
    """Boundary behavior of the subscriber bonus phrases."""

    @pytest.mark.parametrize("subscribers", [None, 0, 999, 1000])
    def test_no_bonus_up_to_one_thousand(self, subscribers):
        pool = build_pool(_metadata(subscribers))

        assert len(pool) == len(COMMUNITY_TEMPLATES) + 5
        assert not any("members" in answer or "users" in answer for answer in pool)

    def test_just_above_one_thousand(self):
        pool = build_pool(_metadata(1001))

        assert "All 1k r/cats members agree" in pool
        assert len(pool) == len(COMMUNITY_TEMPLATES) + 1 + 5

    def test_exactly_one_hundred_thousand_gets_lower_bonus_only(self):
        pool = build_pool(_metadata(100_000))

        assert "All 100k r/cats members agree" in pool
        assert "With 100k members, r/cats says yes" not in pool
        assert len(pool) == len(COMMUNITY_TEMPLATES) + 1 + 5

    def test_just_above_one_hundred_thousand(self):
        pool = build_pool(_metadata(100_001))

        assert "With 100k members, r/cats says yes" in pool
        assert "100k r/cats users can't be wrong" in pool
        assert "All 100k r/cats members agree" not in pool
        assert len(pool) == len(COMMUNITY_TEMPLATES) + 2 + 5

    def test_thousands_use_floor_division(self):
        assert "With 1299k members, r/cats says yes" in build_pool(_metadata(1_299_999))


class TestRulePhrases:
    """Rule-driven flavor text."""

    def test_no_rules_no_rule_phrases(self):
        pool = build_pool(_metadata())

        assert not any(a.startswith("Check rule ") for a in pool)
        assert "The r/cats rules are clear on this" not in pool

    def test_rule_index_is_one_based_and_in_range(self):
        metadata = _metadata(rules=["a", "b", "c"])
        rng = random.Random(7)

        for _ in range(50):
            pool = build_community_pool(metadata, rng=rng)
            phrase = next(a for a in pool if a.startswith("Check rule "))
            index = int(phrase.split()[2])
            assert 1 <= index <= 3

    def test_out_of_range_index_is_clamped(self):
        metadata = _metadata(rules=["a", "b"])

        assert "Check rule 2 of r/cats" in build_pool(metadata, rule_index=9)
        assert "Check rule 1 of r/cats" in build_pool(metadata, rule_index=0)
