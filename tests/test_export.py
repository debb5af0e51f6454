"""Unit tests for CSV export."""

import csv
import io
from datetime import datetime, timezone

from leadgen.domain.models import Lead
from leadgen.export import CSV_COLUMNS, csv_filename, lead_to_row, leads_to_csv


def full_lead():
    return Lead(
        practice_name="Bright Smiles Dental",
        location={"city": "Austin", "state": "TX", "zip": "78701"},
        posted_at=datetime(2025, 11, 4, 12, 0, tzinfo=timezone.utc),
        posted_at_text="Posted today",
        source_url="https://www.ziprecruiter.com/c/Bright-Smiles-Dental/Job/Dental-Receptionist",
        website="https://brightsmilesaustin.com",
        phone="(512) 555-0142",
        email="frontdesk@brightsmilesaustin.com",
        decision_maker_name="Dr. Maria Lopez",
        practice_size="small (2 providers)",
    )


class TestLeadToRow:
    def test_all_columns(self):
        row = lead_to_row(full_lead())

        assert list(row) == CSV_COLUMNS
        assert row["city"] == "Austin"
        assert row["zip"] == "78701"
        assert row["postedAt"] == "2025-11-04T12:00:00Z"
        assert row["decisionMakerName"] == "Dr. Maria Lopez"

    def test_missing_values_are_empty(self):
        row = lead_to_row(Lead(practice_name="Bare"))

        assert row["practiceName"] == "Bare"
        assert all(row[column] == "" for column in CSV_COLUMNS if column != "practiceName")


class TestLeadsToCsv:
    def test_header_only_for_empty_list(self):
        assert leads_to_csv([]) == ",".join(CSV_COLUMNS) + "\r\n"

    def test_rows_parse_back(self):
        text = leads_to_csv([full_lead(), Lead(practice_name="Bare")])
        rows = list(csv.DictReader(io.StringIO(text)))

        assert len(rows) == 2
        assert rows[0]["email"] == "frontdesk@brightsmilesaustin.com"
        assert rows[1]["email"] == ""

    def test_commas_and_quotes_escaped(self):
        lead = Lead(practice_name='Smith, Jones & "Partners" Dental')
        text = leads_to_csv([lead])

        assert '"Smith, Jones & ""Partners"" Dental"' in text
        assert next(csv.DictReader(io.StringIO(text)))["practiceName"] == lead.practice_name

    def test_crlf_line_endings(self):
        text = leads_to_csv([full_lead()])
        assert text.count("\r\n") == 2


class TestFilename:
    def test_format(self):
        now = datetime(2025, 11, 4, 9, 5, tzinfo=timezone.utc)
        assert csv_filename(now) == "dental-receptionist-leads-20251104-0905.csv"

    def test_defaults_to_now(self):
        name = csv_filename()
        assert name.startswith("dental-receptionist-leads-")
        assert name.endswith(".csv")
