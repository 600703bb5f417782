"""Unit tests for grouping, roll-ups and monthly folding (no database)."""
from datetime import date

import pytest

from pharmasales.services.aggregation import (
    GroupTotals,
    MonthBucket,
    day_statistics,
    fold_days_into_months,
    group_statistics,
    header_month_statistics,
    month_statistics,
    percentage,
    rank_groups,
    rollup_invoice_types,
    statistics_response,
)


def test_normal_and_return_roll_up_into_one_total():
    groups = [GroupTotals("Normal", 100, 3, 5, 110), GroupTotals("Return", -20, 1, -1, 0)]

    result = rollup_invoice_types(groups)

    assert [g.key for g in result] == ["Total Normal"]
    assert result[0].total_sales == 80
    assert result[0].total_transactions == 4
    assert result[0].total_quantity == 4
    assert result[0].total_net_total == 110


def test_rollup_matches_case_insensitively_and_keeps_other_types():
    groups = [
        GroupTotals("insurance", 50, 2),
        GroupTotals("RETURNINSURANCE", -5, 1),
        GroupTotals("Exchange", 7, 1),
    ]

    result = rollup_invoice_types(groups)

    keys = [g.key for g in result]
    assert keys == ["Exchange", "Total Insurance"]
    assert result[1].total_sales == 45


def test_rolled_up_totals_are_appended_then_ranked_by_sales():
    groups = [
        GroupTotals("Normal", 100, 3),
        GroupTotals("Return", -20, 1),
        GroupTotals("Exchange", 5, 1),
        GroupTotals("Insurance", 40, 2),
    ]

    rolled = rollup_invoice_types(groups)
    assert [g.key for g in rolled] == ["Exchange", "Total Normal", "Total Insurance"]

    ranked = rank_groups(rolled)
    assert [(g.key, g.total_sales) for g in ranked] == [
        ("Total Normal", 80),
        ("Total Insurance", 40),
        ("Exchange", 5),
    ]


def test_rollup_applies_when_only_one_member_present():
    result = rollup_invoice_types([GroupTotals("Wasfaty", 30, 1)])

    assert [(g.key, g.total_sales) for g in result] == [("Total Wasfaty", 30)]


def test_every_pair_has_a_total_group():
    names = ["Insurance", "Online", "CashCustomer", "CreditCustomer", "Wasfaty", "Normal"]
    groups = [GroupTotals(name, 10, 1) for name in names]

    result = rollup_invoice_types(groups)

    assert sorted(g.key for g in result) == sorted(f"Total {name}" for name in names)


def test_rank_groups_orders_by_total_sales_descending():
    groups = [GroupTotals("a", 5, 1), GroupTotals("b", 50, 1), GroupTotals("c", 20, 1)]

    assert [g.key for g in rank_groups(groups)] == ["b", "c", "a"]


def test_percentages_sum_to_hundred():
    groups = rank_groups([GroupTotals(1, 33.33, 1), GroupTotals(2, 33.33, 1), GroupTotals(3, 33.34, 1)])

    rows = group_statistics(groups, "branchCode")

    assert sum(r["percentage"] for r in rows) == pytest.approx(100, abs=0.05)
    assert rows[0]["branchCode"] in (1, 2, 3)


def test_percentages_are_zero_when_grand_total_is_zero():
    rows = group_statistics([GroupTotals("x", 0, 2), GroupTotals("y", 0, 1)], "salesName")

    assert [r["percentage"] for r in rows] == [0, 0]


def test_percentage_rounds_to_two_decimals():
    assert percentage(1, 3) == 33.33
    assert percentage(5, 0) == 0


def test_group_statistics_merges_extra_fields():
    rows = group_statistics([GroupTotals(101, 10, 1)], "branchCode", {101: {"pharmacyCount": 1}})

    assert rows[0]["pharmacyCount"] == 1
    assert rows[0]["totalSales"] == 10


def test_average_sales_per_day_is_zero_without_days():
    bucket = MonthBucket(year=2024, month=1, totals=GroupTotals((2024, 1), 500, 3))

    assert bucket.days_with_invoices == 0
    assert bucket.average_sales_per_day == 0


def test_fold_days_into_months_orders_chronologically():
    days = [
        (2024, 2, date(2024, 2, 1), GroupTotals("d", 30, 1)),
        (2024, 1, date(2024, 1, 5), GroupTotals("d", 10, 1)),
        (2024, 1, date(2024, 1, 6), GroupTotals("d", 20, 2)),
        (2023, 12, date(2023, 12, 31), GroupTotals("d", 5, 1)),
    ]

    buckets = fold_days_into_months(days)

    assert [(b.year, b.month) for b in buckets] == [(2023, 12), (2024, 1), (2024, 2)]
    january = buckets[1]
    assert january.totals.total_sales == 30
    assert january.days_with_invoices == 2
    assert january.average_sales_per_day == 15


def test_month_statistics_names_months():
    buckets = fold_days_into_months([(2024, 3, 10, GroupTotals("d", 40, 4))])

    rows = month_statistics(buckets)

    assert rows[0]["monthName"] == "Mar"
    assert rows[0]["daysWithInvoices"] == 1
    assert rows[0]["averageSalesPerDay"] == 40
    assert rows[0]["percentage"] == 100


def test_header_month_statistics_reports_invoices():
    buckets = fold_days_into_months([(2024, 1, date(2024, 1, 2), GroupTotals("d", 120, 3))])

    rows = header_month_statistics(buckets)

    assert rows == [
        {
            "year": 2024,
            "month": "Jan",
            "totalSales": 120,
            "totalInvoices": 3,
            "daysWithInvoices": 1,
            "averageSalesPerDay": 120,
            "percentage": 100,
        }
    ]


def test_day_statistics_formats_dates():
    rows = day_statistics([(2024, 1, 5, GroupTotals("d", 10, 1)), (2024, 1, 2, GroupTotals("d", 30, 1))])

    assert [r["date"] for r in rows] == ["2024-01-02", "2024-01-05"]
    assert rows[0]["percentage"] == 75


def test_statistics_response_counts_rows_not_raw_groups():
    raw = [GroupTotals("a", 10, 1), GroupTotals("b", 20, 1)]

    body = statistics_response([{"month": 1}], raw, groupBy="month")

    assert body["count"] == 1
    assert body["summary"]["groupCount"] == 1
    assert body["summary"]["totalSales"] == 30
    assert body["groupBy"] == "month"
