# contact.py

import logging
import re

import requests

import config

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MSG_REQUIRED = "Full name, mobile phone and email are required."
MSG_BAD_EMAIL = "Invalid email address."
MSG_SENT = "Your request was sent successfully! We will get back to you soon."
MSG_FAILED = "Error sending the form. Please try again."
MSG_UNAVAILABLE = "Consultation requests are not available right now."


def build_payload(full_name, mobile, email, report):
    """
    Body for the consultation channel. The score and verbal assessment are
    passed through as-is; the receiving side owns their interpretation.
    """
    return {
        "full_name": full_name,
        "mobile": mobile,
        "email": email,
        "assessmentScore": report.overall_score if report else 0,
        "assessmentResult": report.verbal_assessment if report else "",
    }


def validate_contact(full_name, mobile, email):
    """Return an error message, or None when the fields are acceptable."""
    if not (full_name or "").strip() or not (mobile or "").strip() or not (email or "").strip():
        return MSG_REQUIRED
    if not EMAIL_RE.match(email.strip()):
        return MSG_BAD_EMAIL
    return None


def _json_or_empty(resp):
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def submit_consultation(full_name, mobile, email, report, url=None, session=None, timeout=None):
    """
    Send a consultation request with the assessment outcome attached.

    Args:
        full_name (str): Contact name.
        mobile (str): Contact phone number.
        email (str): Contact email.
        report (Report): The finished assessment, or None.
        url (str, optional): Endpoint; defaults to CONSULTATION_URL.
        session (requests.Session, optional): Session to post with.
        timeout (float, optional): Seconds; defaults to CONSULTATION_TIMEOUT.

    Returns:
        dict: {"message": ...} on success, {"error": ...} otherwise.
    """
    error = validate_contact(full_name, mobile, email)
    if error:
        return {"error": error}

    url = url or config.CONSULTATION_URL
    if not url:
        logger.error("CONSULTATION_URL is not set; dropping consultation request")
        return {"error": MSG_UNAVAILABLE}

    payload = build_payload(full_name.strip(), mobile.strip(), email.strip(), report)
    poster = session or requests
    try:
        resp = poster.post(url, json=payload, timeout=timeout or config.CONSULTATION_TIMEOUT)
    except requests.RequestException as exc:
        logger.error("Consultation request failed: %s", exc)
        return {"error": MSG_FAILED}

    data = _json_or_empty(resp)
    if resp.ok:
        logger.info("Consultation request sent (score=%s)", payload["assessmentScore"])
        return {"message": data.get("message") or MSG_SENT}
    logger.warning("Consultation endpoint returned %s", resp.status_code)
    return {"error": data.get("error") or MSG_FAILED}
