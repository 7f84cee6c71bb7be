"""Tests for collection views, portfolio totals and filtering."""
import pytest
from dataclasses import replace
from datetime import date, timedelta
from decimal import Decimal

from subtracker.application.collection import (
    CollectionViews, ViewName, build_views, filter_view, next_due, portfolio_totals, select_view,
)
from subtracker.domain.subscription import create_subscription

TODAY = date(2024, 6, 7)


def _sub(name, price=100, cycle="Monthly", category="Entertainment", end_in=20, archived=False):
    sub = create_subscription(
        name=name, price=price, billing_cycle=cycle, category=category,
        start_date=date(2024, 1, 1), end_date=TODAY + timedelta(days=end_in),
    )
    return replace(sub, is_archived=archived)


@pytest.fixture
def collection():
    return [
        _sub("Netflix", 649, end_in=3),
        _sub("Spotify", 119, end_in=20),
        _sub("Old Gym", 1500, category="Fitness", end_in=-5),
        _sub("Hotstar", 299, end_in=40, archived=True),
        _sub("Coursera", 12000, cycle="Yearly", category="Education", end_in=7),
    ]


class TestBuildViews:
    def test_partition(self, collection):
        views = build_views(collection, TODAY)
        assert [s.name for s in views.active] == ["Netflix", "Spotify", "Coursera"]
        assert [s.name for s in views.history] == ["Old Gym", "Hotstar"]
        assert [s.name for s in views.ending_soon] == ["Netflix", "Coursera"]

    def test_active_and_history_cover_everything_once(self, collection):
        views = build_views(collection, TODAY)
        ids = [s.id for s in views.active] + [s.id for s in views.history]
        assert sorted(ids) == sorted(s.id for s in collection)

    def test_ending_soon_subset_of_active(self, collection):
        views = build_views(collection, TODAY)
        active_ids = {s.id for s in views.active}
        assert all(s.id in active_ids for s in views.ending_soon)

    def test_invalid_dates_are_active_not_ending(self):
        sub = replace(_sub("Broken"), end_date=None, renewal_date=None)
        views = build_views([sub], TODAY)
        assert views.active == [sub]
        assert views.ending_soon == []

    def test_select_view(self, collection):
        views = build_views(collection, TODAY)
        assert select_view(views, ViewName.HISTORY) is views.history
        assert select_view(views, "ending") is views.ending_soon
        assert select_view(views, "active") is views.active

    def test_empty(self):
        assert build_views([], TODAY) == CollectionViews()


class TestPortfolioTotals:
    def test_totals(self, collection):
        active = build_views(collection, TODAY).active
        totals = portfolio_totals(active)
        assert totals.monthly == Decimal("649") + Decimal("119") + Decimal("1000")
        assert totals.yearly == totals.monthly * 12

    def test_breakdown_sorted_desc(self, collection):
        active = build_views(collection, TODAY).active
        totals = portfolio_totals(active)
        assert [c.name for c in totals.categories] == ["Education", "Entertainment"]
        assert totals.categories[0].amount == Decimal("1000")
        assert totals.categories[1].amount == Decimal("768")

    def test_breakdown_sums_to_total(self):
        subs = [
            _sub("A", 100, cycle="Weekly"),
            _sub("B", 999, cycle="Quarterly", category="Work"),
            _sub("C", 1299, cycle="Yearly", category="Gaming"),
            _sub("D", 49.5, category="News"),
        ]
        totals = portfolio_totals(subs)
        assert float(sum(c.amount for c in totals.categories)) == pytest.approx(float(totals.monthly))
        assert float(sum(c.percent for c in totals.categories)) == pytest.approx(100.0)

    def test_ties_keep_first_seen_order(self):
        subs = [_sub("A", 100, category="Work"), _sub("B", 100, category="News"),
                _sub("C", 100, category="Gaming")]
        assert [c.name for c in portfolio_totals(subs).categories] == ["Work", "News", "Gaming"]

    def test_one_time_dropped_from_breakdown(self):
        subs = [_sub("Course", 5000, cycle="One-time", category="Education"), _sub("Spotify", 119)]
        totals = portfolio_totals(subs)
        assert [c.name for c in totals.categories] == ["Entertainment"]
        assert totals.monthly == Decimal("119")

    def test_empty(self):
        totals = portfolio_totals([])
        assert totals.monthly == 0
        assert totals.categories == []

    def test_percent(self):
        subs = [_sub("A", 300, category="Work"), _sub("B", 100, category="News")]
        shares = portfolio_totals(subs).categories
        assert shares[0].percent == Decimal("75")
        assert shares[1].percent == Decimal("25")


class TestNextDue:
    def test_earliest_renewal(self, collection):
        assert next_due(collection).name == "Old Gym"
        assert next_due(build_views(collection, TODAY).active).name == "Netflix"

    def test_skips_archived_and_invalid(self):
        subs = [_sub("Archived", end_in=1, archived=True),
                replace(_sub("Broken"), renewal_date=None),
                _sub("Real", end_in=9)]
        assert next_due(subs).name == "Real"

    def test_none(self):
        assert next_due([]) is None


class TestFilterView:
    def test_search_case_insensitive(self):
        view = [_sub("Netflix"), _sub("Spotify")]
        assert [s.name for s in filter_view(view, "net", "All")] == ["Netflix"]

    def test_category_exact(self):
        view = [_sub("Netflix"), _sub("Cult", category="Fitness")]
        assert [s.name for s in filter_view(view, "", "Fitness")] == ["Cult"]
        assert filter_view(view, "", "fitness") == []

    def test_combined(self):
        view = [_sub("Netflix"), _sub("Netgear Care", category="Utility")]
        assert [s.name for s in filter_view(view, "NET", "Utility")] == ["Netgear Care"]

    def test_defaults_return_everything(self):
        view = [_sub("A"), _sub("B")]
        assert filter_view(view) == view

    def test_does_not_mutate(self):
        view = [_sub("Netflix"), _sub("Spotify")]
        filter_view(view, "net")
        assert len(view) == 2
