"""Tests for EventAggregator."""
from datetime import date

import pytest

from conftest import TODAY, FakeNewsClient, found, make_article
from macrocal.aggregator import UNKNOWN_SOURCE, EventAggregator, is_trusted_source, summarize
from macrocal.core.models import SearchResult


class TestTrustedSource:
    """Tests for is_trusted_source()."""

    @pytest.mark.parametrize("name", [
        "Reuters",
        "CNBC",
        "Bloomberg News",
        "Yahoo Finance",
        "MarketWatch",
        "Investing.com",
    ])
    def test_trusted(self, name: str):
        assert is_trusted_source(name) is True

    def test_untrusted(self):
        assert is_trusted_source("Random Blog") is False

    def test_missing_source_passes(self):
        assert is_trusted_source(None) is True
        assert is_trusted_source("") is True

    def test_substring_match_overmatches(self):
        """Known limitation: any name containing an allowlisted word passes."""
        assert is_trusted_source("Not Bloomberg News") is True


class TestEventAggregator:
    """Tests for EventAggregator.aggregate()."""

    def test_two_trusted_sources_verify_event(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["cpi"] = found(
            make_article("CPI report on December 10", source_name="Reuters"),
            make_article("CPI report on December 10", source_name="CNBC"),
        )

        events = aggregator.aggregate(["cpi"])

        assert len(events) == 1
        event = events[0]
        assert event.id == "Consumer Price Index (CPI)-2025-12-10"
        assert event.date == date(2025, 12, 10)
        assert event.sources == ["Reuters", "CNBC"]
        assert event.confidence == "Verified"
        assert event.category == "inflation"
        assert event.description == "💹 Consumer Price Index (CPI)"

    def test_single_source_is_estimated(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["gdp"] = found(make_article("GDP release on November 26"))

        events = aggregator.aggregate(["gdp"])

        assert len(events) == 1
        assert events[0].confidence == "Estimated"
        assert events[0].sources == ["Reuters"]

    def test_same_source_twice_does_not_verify(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q1"] = found(make_article("FOMC meeting on December 10"))
        fake_client.results["q2"] = found(make_article("FOMC decision on Dec 10"))

        events = aggregator.aggregate(["q1", "q2"])

        assert len(events) == 1
        assert events[0].sources == ["Reuters"]
        assert events[0].confidence == "Estimated"

    def test_merges_across_queries(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q1"] = found(make_article("FOMC meeting on December 10", source_name="Reuters"))
        fake_client.results["q2"] = found(make_article("Fed decision on December 10", source_name="Bloomberg"))

        events = aggregator.aggregate(["q1", "q2"])

        assert len(events) == 1
        assert events[0].sources == ["Reuters", "Bloomberg"]
        assert events[0].confidence == "Verified"

    def test_untrusted_source_excluded(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["cpi"] = found(
            make_article("CPI report on December 10", source_name="Some Random Blog"),
        )

        assert aggregator.aggregate(["cpi"]) == []

    def test_missing_source_processed(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["cpi"] = found(
            make_article("CPI report on December 10", source_name=None),
        )

        events = aggregator.aggregate(["cpi"])

        assert len(events) == 1
        assert events[0].sources == [UNKNOWN_SOURCE]

    def test_unclassified_article_skipped(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(make_article("Apple event on December 10"))

        assert aggregator.aggregate(["q"]) == []

    def test_description_is_searched(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(
            make_article("Markets this week", description="Retail sales figures arrive on Nov 17"),
        )

        events = aggregator.aggregate(["q"])

        assert [e.id for e in events] == ["Retail Sales Report-2025-11-17"]

    def test_one_article_many_dates(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(
            make_article("JOLTS data on December 9 after delay from November 25"),
        )

        events = aggregator.aggregate(["q"])

        assert [e.date for e in events] == [date(2025, 11, 25), date(2025, 12, 9)]

    def test_output_sorted_by_date(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(
            make_article("GDP report on December 23"),
            make_article("CPI report on November 13"),
            make_article("ISM survey on December 1"),
        )

        events = aggregator.aggregate(["q"])

        dates = [e.date for e in events]
        assert dates == sorted(dates)
        assert len(dates) == 3

    def test_unavailable_query_does_not_abort(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["bad"] = SearchResult.unavailable("HTTP 500")
        fake_client.results["good"] = found(make_article("CPI report on December 10"))

        events = aggregator.aggregate(["bad", "good"])

        assert fake_client.queries == ["bad", "good"]
        assert len(events) == 1

    def test_zero_successful_queries(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["a"] = SearchResult.unavailable("timeout")
        fake_client.results["b"] = SearchResult.unavailable("timeout")

        assert aggregator.aggregate(["a", "b"]) == []

    def test_no_queries(self, aggregator: EventAggregator):
        assert aggregator.aggregate([]) == []

    def test_past_dates_dropped(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(make_article("CPI report released on November 1"))

        assert aggregator.aggregate(["q"]) == []

    def test_custom_trusted_sources(self, fake_client: FakeNewsClient):
        aggregator = EventAggregator(fake_client, trusted_sources=["Axios"], today=lambda: TODAY)
        fake_client.results["q"] = found(
            make_article("CPI report on December 10", source_name="Axios"),
            make_article("CPI report on December 10", source_name="Reuters"),
        )

        events = aggregator.aggregate(["q"])

        assert events[0].sources == ["Axios"]


class TestSummarize:
    """Tests for summarize()."""

    def test_breakdown(self, fake_client: FakeNewsClient, aggregator: EventAggregator):
        fake_client.results["q"] = found(
            make_article("CPI report on December 10", source_name="Reuters"),
            make_article("CPI report on December 10", source_name="CNBC"),
            make_article("Consumer confidence on November 25"),
        )

        breakdown = summarize(aggregator.aggregate(["q"]))

        assert breakdown == {"High": 1, "Medium": 1, "Low": 0, "Verified": 1, "Estimated": 1}

    def test_empty(self):
        assert summarize([]) == {"High": 0, "Medium": 0, "Low": 0, "Verified": 0, "Estimated": 0}
