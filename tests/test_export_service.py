"""Tests for the malicious-list and CSV exports."""

import csv
import io
from datetime import datetime

import pytest

from mass_checker.checker.batch_run import BatchRun
from mass_checker.checker.errors import EmptyExportError, NetworkError
from mass_checker.checker.export_service import ExportService
from mass_checker.model.ip_report import IpReport


def _finished_run(outcomes):
    """Drive a BatchRun by hand: address -> IpReport, exception or None (left pending)."""
    run = BatchRun(list(outcomes))
    for index, outcome in enumerate(outcomes.values()):
        if outcome is None:
            continue
        run.mark_checking(index)
        if isinstance(outcome, Exception):
            run.mark_errored(index, outcome)
        else:
            run.mark_completed(index, outcome)
    run.finish()
    return run


def test_export_malicious_keeps_input_order_and_omits_unknown_parts():
    run = _finished_run({
        "9.9.9.9": IpReport("9.9.9.9", total_reports=250, isp="Some ISP"),
        "1.1.1.1": IpReport("1.1.1.1", total_reports=100, country_name="Australia"),
        "5.5.5.5": IpReport("5.5.5.5", total_reports=101, country_name="Germany", isp="Hetzner"),
        "6.6.6.6": IpReport("6.6.6.6", total_reports=9999),
    })

    lines = ExportService.export_malicious(run).split("\n")

    assert lines == [
        "9.9.9.9 - 250 reports - Some ISP",
        "5.5.5.5 - 101 reports (Germany) - Hetzner",
        "6.6.6.6 - 9999 reports",
    ]


def test_export_malicious_without_matches_raises():
    run = _finished_run({"1.1.1.1": IpReport("1.1.1.1", total_reports=3), "2.2.2.2": NetworkError("down")})

    with pytest.raises(EmptyExportError):
        ExportService.export_malicious(run)


def test_export_malicious_without_run_raises():
    with pytest.raises(EmptyExportError):
        ExportService.export_malicious(None)


def test_export_all_writes_one_row_per_item():
    run = _finished_run({
        "1.2.3.4": IpReport(
            "1.2.3.4",
            total_reports=150,
            abuse_confidence_score=87,
            country_code="NL",
            country_name="Netherlands",
            isp="Acme, Inc.",
            last_reported_at="2024-02-01T00:00:00+00:00",
        ),
        "8.8.8.8": NetworkError("down"),
        "::1": None,
    })

    rows = list(csv.reader(io.StringIO(ExportService.export_all(run))))

    assert rows[0] == ["address", "totalReports", "score", "country", "isp", "lastReported"]
    assert rows[1] == ["1.2.3.4", "150", "87", "Netherlands", "Acme, Inc.", "2024-02-01T00:00:00+00:00"]
    assert rows[2] == ["8.8.8.8", "", "", "", "", ""]
    assert rows[3] == ["::1", "", "", "", "", ""]


def test_export_all_without_run_raises():
    with pytest.raises(EmptyExportError):
        ExportService.export_all(None)


def test_malicious_file_header():
    header = ExportService.malicious_file_header(datetime(2024, 5, 6, 7, 8, 9))

    assert header == "# IPs Malicious - 2024-05-06 07:08:09\n# Format: IP - Reports - Country - ISP\n\n"
