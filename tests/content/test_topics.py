"""Tests for niches and the topic rotation."""

from datetime import date

import pytest

from tiktok_automator.content import (
    TOPIC_DATABASE,
    Niche,
    UnknownNicheError,
    day_of_year,
    topic_for_day,
    topics_by_niche,
)


class TestNiche:
    """Tests for Niche.parse."""

    @pytest.mark.parametrize("value,expected", [
        ("ai_tools", Niche.AI_TOOLS),
        ("  Online_Business ", Niche.ONLINE_BUSINESS),
        (Niche.FACELESS_STORIES, Niche.FACELESS_STORIES),
    ])
    def test_parse_known(self, value, expected):
        """Test supported values parse regardless of case and padding."""
        assert Niche.parse(value) is expected

    def test_parse_unknown_is_rejected(self):
        """Test unknown niches raise instead of falling back to a default."""
        with pytest.raises(UnknownNicheError, match="cooking"):
            Niche.parse("cooking")

    def test_unknown_niche_is_value_error(self):
        """Test callers catching ValueError still see the error."""
        with pytest.raises(ValueError):
            Niche.parse("")

    def test_label(self):
        """Test human readable label."""
        assert Niche.AI_TOOLS.label == "Ai Tools"


class TestTopicRotation:
    """Tests for topic_for_day and day_of_year."""

    def test_every_niche_has_topics(self):
        """Test the database covers each niche."""
        assert {topic.niche for topic in TOPIC_DATABASE} == set(Niche)

    def test_rotation_wraps(self):
        """Test day N and day N + len(database) give the same topic."""
        size = len(TOPIC_DATABASE)
        assert topic_for_day(3) == topic_for_day(3 + size)
        assert topic_for_day(size) == TOPIC_DATABASE[0]

    def test_consecutive_days_differ(self):
        """Test the topic changes from one day to the next."""
        assert topic_for_day(100) != topic_for_day(101)

    def test_defaults_to_today(self):
        """Test no argument uses today's day of year."""
        assert topic_for_day() == topic_for_day(day_of_year())

    def test_day_of_year(self):
        """Test day of year for known dates."""
        assert day_of_year(date(2024, 1, 1)) == 1
        assert day_of_year(date(2024, 12, 31)) == 366

    def test_topics_by_niche(self):
        """Test filtering by niche accepts strings."""
        topics = topics_by_niche("faceless_stories")
        assert topics
        assert all(topic.niche is Niche.FACELESS_STORIES for topic in topics)

    def test_topics_by_unknown_niche(self):
        """Test filtering by an unknown niche raises."""
        with pytest.raises(UnknownNicheError):
            topics_by_niche("crypto")
