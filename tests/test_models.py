"""Tests for report normalisation, classification and aggregate stats."""

import pytest

from mass_checker.checker.errors import LookupErrorKind
from mass_checker.model.aggregate_stats import AggregateStats
from mass_checker.model.ip_report import IpReport, ReputationLevel, classify
from mass_checker.model.verification_item import ItemState, VerificationItem


@pytest.mark.parametrize(
    "total_reports, expected",
    [
        (0, ReputationLevel.CLEAN),
        (1, ReputationLevel.WARNING),
        (100, ReputationLevel.WARNING),
        (101, ReputationLevel.MALICIOUS),
    ],
)
def test_classification_thresholds(total_reports, expected):
    assert classify(total_reports) is expected


def test_from_api_keeps_rich_fields():
    data = {
        "ipAddress": "118.25.6.39",
        "isPublic": True,
        "ipVersion": 4,
        "isWhitelisted": False,
        "abuseConfidenceScore": 100,
        "countryCode": "CN",
        "countryName": "China",
        "usageType": "Data Center/Web Hosting/Transit",
        "isp": "Tencent Cloud Computing (Beijing) Co. Ltd",
        "domain": "tencent.com",
        "hostnames": ["host.example"],
        "isTor": False,
        "totalReports": 1764,
        "numDistinctUsers": 450,
        "lastReportedAt": "2024-01-12T10:14:27+00:00",
    }

    report = IpReport.from_api(data, address="118.25.6.39")

    assert report.total_reports == 1764
    assert report.num_distinct_users == 450
    assert report.hostnames == ["host.example"]
    assert report.country_name == "China"
    assert report.is_public is True
    assert report.level is ReputationLevel.MALICIOUS


def test_from_api_normalises_missing_and_null_fields():
    report = IpReport.from_api(
        {"countryName": None, "isp": "", "totalReports": None, "hostnames": None},
        address="2001:0db8:85a3:0000:0000:8a2e:0370:7334",
    )

    assert report.ip_address == "2001:0db8:85a3:0000:0000:8a2e:0370:7334"
    assert report.ip_version == 6
    assert report.total_reports == 0
    assert report.country_name is None
    assert report.isp is None
    assert report.hostnames == []
    assert report.last_reported_at is None
    assert report.is_whitelisted is False


def test_pending_item_is_never_clean():
    pending = VerificationItem(address="1.1.1.1")
    stopped = VerificationItem(address="2.2.2.2", state=ItemState.STOPPED)

    assert pending.level is None
    stats = AggregateStats.from_items([pending, stopped])
    assert stats.clean == 0
    assert stats.in_progress == 1
    assert stats.stopped == 1


def test_aggregate_stats_counts_each_state():
    items = [
        VerificationItem("1.1.1.1", ItemState.COMPLETED, report=IpReport("1.1.1.1", total_reports=0)),
        VerificationItem("2.2.2.2", ItemState.COMPLETED, report=IpReport("2.2.2.2", total_reports=100)),
        VerificationItem("3.3.3.3", ItemState.COMPLETED, report=IpReport("3.3.3.3", total_reports=101)),
        VerificationItem("4.4.4.4", ItemState.ERRORED, error_message="x", error_kind=LookupErrorKind.NETWORK),
        VerificationItem("5.5.5.5", ItemState.CHECKING),
        VerificationItem("6.6.6.6", ItemState.STOPPED),
    ]

    stats = AggregateStats.from_items(items)

    assert stats == AggregateStats(
        total=6, completed=3, in_progress=1, errors=1, stopped=1, malicious=1, warning=1, clean=1
    )


def test_item_to_dict_uses_plain_values():
    item = VerificationItem("4.4.4.4", ItemState.ERRORED, error_message="限流", error_kind=LookupErrorKind.RATE_LIMITED)

    data = item.to_dict()

    assert data == {
        "address": "4.4.4.4",
        "state": "error",
        "level": None,
        "report": None,
        "error_message": "限流",
        "error_kind": "rate_limited",
    }
