import httpx
import logging
from typing import List, Optional, Union

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from app.core.config import (
    RESEND_API_KEY,
    RESEND_API_URL,
    EMAIL_FROM,
    EXTERNAL_CALL_TIMEOUT,
)
from app.core.exceptions import (
    ConfigurationError,
    ExternalTimeoutError,
    NotificationDeliveryError,
)

logger = logging.getLogger(__name__)


# Retry transport failures only, never API error responses
@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, max=4),
    retry=retry_if_exception_type(httpx.TransportError),
    reraise=True,
)
async def _post_email(payload: dict) -> httpx.Response:
    async with httpx.AsyncClient(timeout=EXTERNAL_CALL_TIMEOUT) as client:
        return await client.post(
            RESEND_API_URL,
            json=payload,
            headers={"Authorization": f"Bearer {RESEND_API_KEY}"},
        )


async def send_email(
    to: Union[str, List[str]],
    subject: str,
    html: str,
    sender: Optional[str] = None,
) -> Optional[str]:
    """
    Send an HTML email through the Resend API.

    Args:
        to: Recipient address or list of addresses
        subject: Subject line
        html: HTML body
        sender: Overrides EMAIL_FROM

    Returns:
        Provider message id

    Raises:
        ConfigurationError: RESEND_API_KEY is not set
        ExternalTimeoutError: provider did not answer in time
        NotificationDeliveryError: provider refused or was unreachable
    """
    if not RESEND_API_KEY:
        raise ConfigurationError("RESEND_API_KEY", "Email delivery is not configured")

    recipients = [to] if isinstance(to, str) else list(to)
    payload = {
        "from": sender or EMAIL_FROM,
        "to": recipients,
        "subject": subject,
        "html": html,
    }

    try:
        response = await _post_email(payload)
    except httpx.TimeoutException:
        logger.error(f"Email provider timed out sending '{subject}'")
        raise ExternalTimeoutError("email", EXTERNAL_CALL_TIMEOUT)
    except httpx.HTTPError as e:
        logger.error(f"Error sending email '{subject}': {str(e)}")
        raise NotificationDeliveryError(f"Email provider unreachable: {type(e).__name__}")

    if response.status_code >= 400:
        logger.error(
            f"Email provider rejected '{subject}': {response.status_code}",
            extra={"status_code": response.status_code, "body": response.text[:500]},
        )
        raise NotificationDeliveryError(f"Email provider returned {response.status_code}")

    message_id = response.json().get("id")
    logger.info(f"Email sent: {subject}", extra={"message_id": message_id, "recipients": len(recipients)})
    return message_id
