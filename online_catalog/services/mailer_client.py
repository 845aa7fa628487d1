"""
Auth mail integration: confirmation links, OTP codes and password recovery links
are POSTed to a transactional mail relay. Failure does not fail the request.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from online_catalog.config import get_settings

logger = logging.getLogger(__name__)

TEMPLATE_CONFIRM = "confirm_signup"
TEMPLATE_RECOVERY = "reset_password"


async def send_auth_email(
    to: str, template: str, link: str, otp: Optional[str] = None
) -> tuple[int, dict[str, Any]]:
    """
    POST {"to", "template", "link", "otp"} to the mailer.
    Returns (status_code, response_body).
    """
    settings = get_settings()
    url = settings.mailer_url
    payload: dict[str, Any] = {"to": to, "template": template, "link": link}
    if otp is not None:
        payload["otp"] = otp
    try:
        async with httpx.AsyncClient(timeout=settings.mailer_request_timeout) as client:
            resp = await client.post(url, json=payload)
            body = resp.json() if resp.headers.get("content-type", "").startswith("application/json") else {}
            logger.info(
                "mailer_response",
                extra={"mailer_response": {"status_code": resp.status_code, "body": body}, "template": template},
            )
            return resp.status_code, body
    except Exception as e:
        logger.exception("mailer_request_failed", extra={"error": str(e), "url": url})
        return 500, {"error": str(e)}
