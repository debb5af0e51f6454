"""HTML rendering for the operator page using Jinja2."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from urllib.parse import urlencode

from jinja2 import Environment, PackageLoader, StrictUndefined

from leadgen.domain.models import Lead
from leadgen.utils.timestamps import utc_now

logger = logging.getLogger(__name__)


def _location_text(lead: Lead) -> Optional[str]:
    if not lead.location:
        return None
    parts = [lead.location.city, lead.location.state, lead.location.zip]
    return ", ".join(part for part in parts if part) or None


def _posted_text(lead: Lead) -> Optional[str]:
    if lead.posted_at:
        return lead.posted_at.strftime("%Y-%m-%d %H:%M")
    return lead.posted_at_text


class PageRenderer:
    """Renders the lead table page.

    The template is loaded once from ``leadgen/api/templates`` and cached by
    the Jinja2 environment.
    """

    def __init__(self, template_name: str = "leads.html.j2"):
        self.template_name = template_name
        self.env = Environment(
            loader=PackageLoader("leadgen.api", "templates"),
            autoescape=True,
            undefined=StrictUndefined,
        )
        logger.debug(f"Initialized PageRenderer with template {template_name}")

    def render(
        self,
        leads: List[Lead],
        limit: int,
        days: int,
        error: Optional[str] = None,
        now: Optional[datetime] = None,
        export_url: Optional[str] = None,
    ) -> str:
        """Render the page for a lead list (or an error banner).

        ``export_url`` points the CSV link at the rendered run; without it the
        link asks for a fresh run with the same parameters.
        """
        now = now or utc_now()
        if export_url is None:
            export_url = "/api/leads.csv?" + urlencode({"limit": limit, "days": days})
        cutoff = now - timedelta(days=days)
        rows = [
            {
                "practice_name": lead.practice_name,
                "phone": lead.phone,
                "email": lead.email,
                "location": _location_text(lead),
                "posted": _posted_text(lead),
                "website": lead.website,
                "decision_maker_name": lead.decision_maker_name,
                "practice_size": lead.practice_size,
                "source_url": lead.source_url,
            }
            for lead in leads
        ]
        fresh = sum(1 for lead in leads if lead.posted_at and lead.posted_at > cutoff)

        template = self.env.get_template(self.template_name)
        return template.render(
            rows=rows,
            total=len(leads),
            fresh=fresh,
            limit=limit,
            days=days,
            error=error,
            export_url=export_url,
        )
