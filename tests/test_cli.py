"""Tests for the command line entry point."""

from datetime import date, timedelta

import yaml

from contractor_invoicing.cli import load_records, main


def test_schedule_command(capsys):
    exit_code = main(["schedule", "--start", "2024-01-08", "--periods", "3", "--today", "2024-01-15"])
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "Period 1: 2024-01-08 - 2024-01-11 (4 days)" in out
    assert "(Partial Period)" in out
    assert "Payment: 2024-01-26  <- current" in out
    assert "Period 2: submit by 2024-01-26" in out


def test_schedule_command_with_holiday_adjustment(capsys):
    exit_code = main(
        ["schedule", "--start", "2026-12-21", "--periods", "1", "--adjust-holidays", "--today", "2026-12-21"]
    )
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "Payment: 2026-12-28 (moved from 2026-12-25)" in out


def test_schedule_command_rejects_bad_date(capsys):
    exit_code = main(["schedule", "--start", "someday"])

    assert exit_code == 2
    assert "Invalid contract_start" in capsys.readouterr().err


def _write_records(path, start: date) -> None:
    records = []
    for offset in range(14):
        day = start + timedelta(days=offset)
        if day.weekday() >= 5:
            continue
        idx = len(records)
        records.append(
            {
                "entry_date": day.isoformat(),
                "days_worked": 1,
                "truck_used": idx < 2,
                "travel_kms": 10,
                "subsistence_claimed": idx < 3,
            }
        )
    path.write_text(yaml.safe_dump({"records": records}), encoding="utf-8")


def test_invoice_command(tmp_path, capsys):
    records_path = tmp_path / "records.yaml"
    _write_records(records_path, date(2024, 1, 12))

    exit_code = main(
        [
            "invoice",
            "--start",
            "2024-01-08",
            "--period",
            "2",
            "--records",
            str(records_path),
            "--sequence",
            "INV-1001",
        ]
    )
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "-P02" in out
    assert "Labor - 10 days worked" in out
    assert "$5,093.00" in out
    assert "$254.65" in out
    assert "$5,347.65" in out


def test_invoice_command_unknown_period(tmp_path, capsys):
    records_path = tmp_path / "records.yaml"
    records_path.write_text("records: []\n", encoding="utf-8")

    exit_code = main(
        ["invoice", "--start", "2024-01-08", "--period", "30", "--records", str(records_path)]
    )

    assert exit_code == 2
    assert "Period 30 not found" in capsys.readouterr().err


def test_load_records_accepts_plain_list(tmp_path):
    path = tmp_path / "records.yaml"
    path.write_text("- entry_date: 2024-01-15\n  days_worked: 0.5\n", encoding="utf-8")

    records = load_records(path)

    assert len(records) == 1
    assert records[0].date == date(2024, 1, 15)
    assert str(records[0].days_worked) == "0.5"


def test_load_records_empty_file(tmp_path):
    path = tmp_path / "records.yaml"
    path.write_text("", encoding="utf-8")

    assert load_records(path) == []


def test_schedule_command_rejects_zero_periods(capsys):
    exit_code = main(["schedule", "--start", "2024-01-08", "--periods", "0"])

    assert exit_code == 2
    assert "period_count must be at least 1" in capsys.readouterr().err


def test_invoice_command_rejects_zero_periods(tmp_path, capsys):
    records_path = tmp_path / "records.yaml"
    records_path.write_text("records: []\n", encoding="utf-8")

    exit_code = main(
        [
            "invoice",
            "--start",
            "2024-01-08",
            "--period",
            "1",
            "--periods",
            "0",
            "--records",
            str(records_path),
        ]
    )

    assert exit_code == 2


def test_invoice_command_writes_html(tmp_path, capsys):
    records_path = tmp_path / "records.yaml"
    _write_records(records_path, date(2024, 1, 12))
    output = tmp_path / "invoice.html"

    exit_code = main(
        [
            "invoice",
            "--start",
            "2024-01-08",
            "--period",
            "2",
            "--records",
            str(records_path),
            "--sequence",
            "INV-1001",
            "--name",
            "Dana Field",
            "--bill-to",
            "Stack Production Testing",
            "--format",
            "html",
            "--output",
            str(output),
        ]
    )

    assert exit_code == 0
    assert "Wrote INV-1001-" in capsys.readouterr().out
    html = output.read_text(encoding="utf-8")
    assert html.startswith("<!DOCTYPE html>")
    assert "Dana Field" in html
    assert "Stack Production Testing" in html
    assert "$5,347.65" in html


def test_calendar_command_on_generation_day(capsys):
    exit_code = main(["calendar", "--today", "2025-01-18", "--year", "2025"])
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "Stack Production Testing payroll calendar (26 periods)" in out
    assert "Current period: stack-2025-01-03 Jan 17 - Jan 30, 2025" in out
    assert "Invoice generation today: stack-2025-01-02" in out
    assert "reminder_tuesday   2025-01-21 09:00" in out
    assert "stack-2025-01-03: 2025-01-30" not in out
    assert "Year 2025: 26 periods, 259 work days" in out
    assert "  08: 3 periods, 30 work days" in out


def test_calendar_command_missing_file(tmp_path, capsys):
    exit_code = main(["calendar", "--calendar", str(tmp_path / "missing.yaml")])

    assert exit_code == 2
    assert "Payroll calendar not found" in capsys.readouterr().err
