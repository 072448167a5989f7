"""Decode what a scanner sends for a student's ID card.

Cards carry either the bare admission number or a JSON payload
``{"admissionNumber": ..., "issueDate": "YYYY-MM-DD", "expiryDate": "YYYY-MM-DD"}``.
"""

from __future__ import annotations

import json
from datetime import date

from ..common.datetime_utils import parse_iso_date
from ..common.validators import require_non_empty
from ..core.exceptions import ValidationError


def admission_number_from_qr(raw: str, *, today: date) -> str:
    raw = require_non_empty(raw, "QR code")
    if not raw.startswith("{"):
        return raw

    try:
        payload = json.loads(raw)
    except ValueError:
        raise ValidationError("QR code is not a valid ID card payload")
    if not isinstance(payload, dict):
        raise ValidationError("QR code is not a valid ID card payload")

    admission_number = require_non_empty(str(payload.get("admissionNumber") or ""), "Admission number")

    expiry = payload.get("expiryDate")
    if expiry:
        try:
            expiry_date = parse_iso_date(str(expiry)[:10])
        except ValueError:
            raise ValidationError("QR code has an invalid expiry date")
        if expiry_date < today:
            raise ValidationError("ID card has expired")

    return admission_number
