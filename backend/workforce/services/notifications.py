"""
Resolution webhook.

The approval queue never touches origin-subsystem data; once an item is
approved or rejected, the outcome is POSTed to APPROVAL_WEBHOOK_URL so the
payroll/leave/contract subsystem can apply it. Delivery is best-effort: a
failure is logged and the origin can still poll GET /api/approvals/{id}.
"""

import logging

import httpx

from workforce.core.config import settings
from workforce.db.models import ApprovalItem
from workforce.schemas.approval import ApprovalItemResponse

logger = logging.getLogger(__name__)


async def notify_resolution(
    item: ApprovalItem,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """Returns True if the webhook accepted the notification."""
    url = settings.APPROVAL_WEBHOOK_URL
    if not url:
        return False

    payload = {
        "event": f"approval.{item.status}",
        "item": ApprovalItemResponse.model_validate(item).model_dump(mode="json"),
    }
    try:
        async with httpx.AsyncClient(
            timeout=settings.APPROVAL_WEBHOOK_TIMEOUT_SEC,
            transport=transport,
        ) as client:
            resp = await client.post(url, json=payload)
            resp.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Approval webhook failed for item=%s: %s", item.id, exc)
        return False

    logger.info("Approval webhook delivered: item=%s event=%s", item.id, payload["event"])
    return True
