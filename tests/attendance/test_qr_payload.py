import json
from datetime import date

import pytest

from school_attendance.attendance.qr_payload import admission_number_from_qr
from school_attendance.core.exceptions import ValidationError

TODAY = date(2026, 3, 2)


def test_bare_admission_number():
    assert admission_number_from_qr(" S001 ", today=TODAY) == "S001"


def test_json_card_payload():
    raw = json.dumps({"admissionNumber": "S002", "issueDate": "2025-09-01", "expiryDate": "2026-08-31"})

    assert admission_number_from_qr(raw, today=TODAY) == "S002"


def test_card_valid_on_expiry_day():
    raw = json.dumps({"admissionNumber": "S002", "expiryDate": "2026-03-02"})

    assert admission_number_from_qr(raw, today=TODAY) == "S002"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "{not json",
        json.dumps({"expiryDate": "2026-08-31"}),
        json.dumps({"admissionNumber": "S002", "expiryDate": "2026-03-01"}),
        json.dumps({"admissionNumber": "S002", "expiryDate": "someday"}),
    ],
)
def test_rejected_payloads(raw):
    with pytest.raises(ValidationError):
        admission_number_from_qr(raw, today=TODAY)
