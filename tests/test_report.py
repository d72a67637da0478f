"""Tests for the duplicate report."""
import json
import logging

import main
from jobsweep.core.report import duplicate_report, normalize_key, report_file

ITEMS = [
    {"title": "Python Developer", "employer": "Acme", "url": "https://e.com/jobs/1?trk=a"},
    {"title": "Python Developer", "employer": "Acme", "url": "https://e.com/jobs/1?trk=a"},
    {"title": "python developer!", "employer": "ACME", "url": "https://e.com/jobs/1?trk=b"},
    {"title": "Data Engineer", "employer": "Globex", "url": "https://e.com/jobs/2"},
]


def test_normalize_key():
    assert normalize_key("  Senior   Dev’s / Team!|ACME ") == "senior dev s team acme"
    assert normalize_key(None) == ""


def test_duplicate_report_groups():
    report = duplicate_report(ITEMS, canonical=lambda u: u.split("?")[0])

    assert report.total == 4
    assert report.unique_urls == 3
    assert report.unique_canonical_urls == 2
    assert report.unique_title_employer == 2
    assert [(g.count, g.indexes) for g in report.by_url] == [(2, [0, 1])]
    assert [(g.count, g.indexes) for g in report.by_canonical_url] == [(3, [0, 1, 2])]
    assert report.by_title_employer[0].key == "python developer acme"
    assert report.by_title_employer[0].count == 3


def test_report_summary_mentions_each_grouping():
    summary = duplicate_report(ITEMS).summary()
    assert "Total items: 4" in summary
    assert "Duplicate groups (exact URL): 1" in summary
    assert "Duplicate groups (title|employer): 1" in summary


def test_report_file(tmp_path):
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps(ITEMS), encoding="utf-8")
    assert report_file(str(path)).total == 4


async def test_report_command_logs_summary(tmp_path, caplog):
    path = tmp_path / "jobs.json"
    path.write_text(json.dumps(ITEMS), encoding="utf-8")
    caplog.set_level(logging.INFO)

    assert await main.main(["report", str(path), "--site", "indeed"]) == 0

    assert "Total items: 4" in caplog.text
    assert "Unique exact URLs: 3" in caplog.text
