"""Unit tests for niss/news.py: time decay, source credibility, headline relevance."""
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from niss.news import (
    headline_relevance,
    news_time_decay,
    parse_timestamp,
    source_credibility,
    time_decay,
)

AS_OF = datetime(2026, 1, 15, 16, 0, tzinfo=timezone.utc)


# ── time_decay ──────────────────────────────────────────────────────


class TestTimeDecay:
    @pytest.mark.parametrize(
        "age_hours, expected",
        [(0.0, 1.0), (0.5, 1.0), (3, 0.9), (12, 0.7), (48, 0.5), (100, 0.3)],
    )
    def test_bands(self, age_hours, expected):
        assert time_decay(age_hours) == expected

    def test_band_edges_fall_into_older_band(self):
        assert time_decay(1.0) == 0.9
        assert time_decay(6.0) == 0.7
        assert time_decay(24.0) == 0.5
        assert time_decay(72.0) == 0.3

    def test_unknown_age_is_moderately_stale(self):
        assert time_decay(None) == 0.5

    def test_nan_age_is_unknown(self):
        assert time_decay(float("nan")) == 0.5


class TestNewsTimeDecay:
    def test_epoch_seconds(self):
        assert news_time_decay(AS_OF.timestamp() - 1800, AS_OF) == 1.0
        assert news_time_decay(int(AS_OF.timestamp()) - 3 * 3600, AS_OF) == 0.9

    def test_iso_string(self):
        # exactly six hours old
        assert news_time_decay("2026-01-15T10:00:00Z", AS_OF) == 0.7

    def test_naive_datetime_is_utc(self):
        assert news_time_decay(datetime(2026, 1, 15, 14, 0), AS_OF) == 0.9

    def test_old_article(self):
        assert news_time_decay(AS_OF - timedelta(days=5), AS_OF) == 0.3

    def test_missing_or_garbage(self):
        assert news_time_decay(None, AS_OF) == 0.5
        assert news_time_decay("not a date", AS_OF) == 0.5
        assert news_time_decay(float("inf"), AS_OF) == 0.5

    def test_future_timestamp_counts_as_fresh(self):
        assert news_time_decay(AS_OF + timedelta(hours=2), AS_OF) == 1.0


def test_parse_timestamp_numpy_number():
    parsed = parse_timestamp(np.int64(1_768_492_800))
    assert parsed == datetime(2026, 1, 15, 16, 0, tzinfo=timezone.utc)


def test_parse_timestamp_rejects_bool():
    assert parse_timestamp(True) is None


# ── source_credibility ──────────────────────────────────────────────


class TestSourceCredibility:
    @pytest.mark.parametrize(
        "source, expected",
        [
            ("Reuters", 1.2),
            ("BLOOMBERG News", 1.2),
            ("wsj.com", 1.15),
            ("The Wall Street Journal", 1.15),
            ("Financial Times", 1.15),
            ("CNBC", 1.0),
            ("MarketWatch", 1.0),
            ("Yahoo Finance", 0.85),
            ("Seeking Alpha", 0.8),
            ("The Motley Fool", 0.75),
        ],
    )
    def test_table(self, source, expected):
        assert source_credibility(source) == expected

    def test_unmatched_source_below_neutral(self):
        assert source_credibility("Benzinga") == 0.7
        assert source_credibility("Benzinga") < 1.0

    def test_missing_source(self):
        assert source_credibility(None) == 0.7
        assert source_credibility("") == 0.7

    def test_custom_table_and_default(self):
        table = {"Benzinga": 0.9}
        assert source_credibility("benzinga pro", table) == 0.9
        assert source_credibility("Reuters", table, default=0.5) == 0.5


# ── headline_relevance ──────────────────────────────────────────────


class TestHeadlineRelevance:
    def test_symbol_mention(self):
        assert headline_relevance("AAPL shares rise", "AAPL") == 70

    def test_symbol_match_is_case_insensitive(self):
        assert headline_relevance("aapl shares rise", "AAPL") == 70

    def test_high_impact_keyword(self):
        # "apple" does not contain "aapl"
        assert headline_relevance("Apple announces dividend increase", "AAPL") == 52

    def test_medium_impact_keywords(self):
        assert headline_relevance("Analyst upgrade lifts TSLA price target", "TSLA") == 84

    def test_clamped_at_100(self):
        headline = "AAPL earnings: revenue, profit and dividend beat, guidance raised"
        assert headline_relevance(headline, "AAPL") == 100

    def test_plain_headline_gets_base(self):
        assert headline_relevance("Markets drift sideways", "AAPL") == 40

    def test_missing_headline_is_neutral(self):
        assert headline_relevance(None, "AAPL") == 50
        assert headline_relevance("", "AAPL") == 50
