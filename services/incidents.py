# services/incidents.py
import re
import uuid
from datetime import datetime, timezone
from io import BytesIO

import pandas as pd
from flask import current_app

from models.database import NO_IMAGE, Incident
from .errors import NotFoundError, ValidationError


REGIONS = ("NORTH", "SOUTH 1", "SOUTH 2", "WEST", "EAST")
REQUIRED_FIELDS = ("dealerCode", "issue", "email")
TEXT_FIELDS = ("issue", "email", "location", "region", "screenshot")
# the form may send these as numbers
CODE_FIELDS = ("dealerCode", "contactNo")

DEALER_CODE_RE = re.compile(r"^\d{7}$")
CONTACT_NO_RE = re.compile(r"^[6-9]\d{9}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def parse_reported_at(value):
    """Parse an ISO-8601 timestamp from the client into naive UTC."""
    if isinstance(value, str) and value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError("reportedAt must be an ISO-8601 timestamp")
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _parse_id(incident_id):
    try:
        return uuid.UUID(str(incident_id))
    except ValueError:
        return None


class IncidentService:
    def __init__(self, session, cfg, clock=datetime.utcnow):
        self.session = session
        self.cfg = cfg
        self.clock = clock

    def _validate(self, fields):
        missing = [name for name in REQUIRED_FIELDS if not fields.get(name)]
        if missing:
            raise ValidationError("Dealer code, issue, and email are required.")

        for name in TEXT_FIELDS:
            value = fields.get(name)
            if value is not None and not isinstance(value, str):
                raise ValidationError(f"{name} must be a string")
        for name in CODE_FIELDS:
            value = fields.get(name)
            if value is not None and (isinstance(value, bool) or not isinstance(value, (str, int))):
                raise ValidationError(f"{name} must be a string or number")

        if not self.cfg["STRICT_VALIDATION"]:
            return

        if not DEALER_CODE_RE.match(str(fields["dealerCode"])):
            raise ValidationError("Enter a valid 7-digit dealer code")
        if not EMAIL_RE.match(str(fields["email"])):
            raise ValidationError("Enter a valid email address")

        contact_no = fields.get("contactNo")
        if contact_no and not CONTACT_NO_RE.match(str(contact_no)):
            raise ValidationError("Enter a valid Contact number")

        region = fields.get("region")
        if region and region not in REGIONS:
            raise ValidationError(f"Region must be one of: {', '.join(REGIONS)}")

    def submit_incident(self, fields):
        fields = fields or {}
        self._validate(fields)

        reported_at = fields.get("reportedAt")
        incident = Incident(
            dealer_code=str(fields["dealerCode"]),
            location=fields.get("location") or "",
            region=fields.get("region") or "",
            issue=fields["issue"],
            email=fields["email"],
            contact_no=str(fields.get("contactNo") or ""),
            screenshot=fields.get("screenshot") or NO_IMAGE,
            reported_at=parse_reported_at(reported_at) if reported_at else self.clock(),
            checked=False,
        )
        self.session.add(incident)
        self.session.commit()

        current_app.logger.info("Incident %s reported by dealer %s", incident.id, incident.dealer_code)
        return incident

    def list_incidents(self, region=None, checked=None):
        query = self.session.query(Incident)
        if region:
            query = query.filter(Incident.region == region)
        if checked is not None:
            query = query.filter(Incident.checked == checked)
        return query.all()

    def get_incident(self, incident_id):
        parsed = _parse_id(incident_id)
        incident = self.session.get(Incident, parsed) if parsed else None
        if incident is None:
            raise NotFoundError("Incident not found")
        return incident

    def delete_incident(self, incident_id):
        incident = self.get_incident(incident_id)
        self.session.delete(incident)
        self.session.commit()
        current_app.logger.info("Incident %s deleted", incident_id)

    def set_incident_checked(self, incident_id, checked):
        if not isinstance(checked, bool):
            raise ValidationError("checked must be true or false")

        incident = self.get_incident(incident_id)
        incident.checked = checked
        self.session.commit()
        current_app.logger.info("Incident %s marked checked=%s", incident_id, checked)
        return incident

    def export_incidents(self):
        """Render every incident as an .xlsx workbook and return its bytes."""
        data = []
        for inc in self.list_incidents():
            data.append({
                "ID": str(inc.id),
                "Dealer Code": inc.dealer_code,
                "Location": inc.location or "",
                "Region": inc.region or "",
                "Issue": inc.issue,
                "Email": inc.email,
                "Contact No": inc.contact_no or "",
                "Screenshot": "Yes" if inc.has_screenshot else "No",
                "Reported At": inc.reported_at.isoformat() if inc.reported_at else "",
                "Checked": "Yes" if inc.checked else "No",
            })

        df = pd.DataFrame(data, columns=[
            "ID", "Dealer Code", "Location", "Region", "Issue", "Email",
            "Contact No", "Screenshot", "Reported At", "Checked",
        ])

        output = BytesIO()
        with pd.ExcelWriter(output, engine="openpyxl") as writer:
            df.to_excel(writer, index=False, sheet_name="Incidents")

        return output.getvalue()
