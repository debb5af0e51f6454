"""CSV export of lead lists."""

import csv
import io
from datetime import datetime
from typing import Iterable, Optional

from leadgen.domain.models import Lead
from leadgen.utils.timestamps import format_timestamp, utc_now

CSV_COLUMNS = [
    "practiceName",
    "phone",
    "email",
    "city",
    "state",
    "zip",
    "postedAt",
    "postedAtText",
    "website",
    "decisionMakerName",
    "practiceSize",
    "sourceUrl",
]


def lead_to_row(lead: Lead) -> dict:
    location = lead.location
    return {
        "practiceName": lead.practice_name,
        "phone": lead.phone or "",
        "email": lead.email or "",
        "city": (location.city if location else None) or "",
        "state": (location.state if location else None) or "",
        "zip": (location.zip if location else None) or "",
        "postedAt": format_timestamp(lead.posted_at) if lead.posted_at else "",
        "postedAtText": lead.posted_at_text or "",
        "website": lead.website or "",
        "decisionMakerName": lead.decision_maker_name or "",
        "practiceSize": lead.practice_size or "",
        "sourceUrl": lead.source_url or "",
    }


def leads_to_csv(leads: Iterable[Lead]) -> str:
    """Serialize leads to CSV text with a header row.

    Missing values are written as empty cells; quoting follows RFC 4180.
    """
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=CSV_COLUMNS, lineterminator="\r\n")
    writer.writeheader()
    for lead in leads:
        writer.writerow(lead_to_row(lead))
    return buffer.getvalue()


def csv_filename(now: Optional[datetime] = None) -> str:
    """Download name such as ``dental-receptionist-leads-20251104-1230.csv``."""
    stamp = (now or utc_now()).strftime("%Y%m%d-%H%M")
    return f"dental-receptionist-leads-{stamp}.csv"
