# sales-enablement/alert_client.py
import os
import logging
import requests
from dotenv import load_dotenv

load_dotenv()

log = logging.getLogger(__name__)

WEBHOOK_URL_TIER_REACHED = os.getenv("WEBHOOK_URL_TIER_REACHED")
WEBHOOK_URL_TOOL_UNLOCKED = os.getenv("WEBHOOK_URL_TOOL_UNLOCKED")

def _post(url: str, payload: dict, context: str) -> bool:
    try:
        response = requests.post(url, json=payload, timeout=5)
        response.raise_for_status()
        log.info("Successfully triggered '%s' alert.", context)
        return True
    except requests.exceptions.RequestException as e:
        log.warning("Failed to trigger '%s' webhook: %s", context, e)
        return False

def trigger_tier_alert(customer_id: str, tier: str, total_points: int) -> bool:
    if not WEBHOOK_URL_TIER_REACHED:
        log.info("WEBHOOK_URL_TIER_REACHED is not set. Skipping.")
        return False
    payload = {
        "customer_id": customer_id,
        "tier": tier,
        "total_points": total_points,
    }
    return _post(WEBHOOK_URL_TIER_REACHED, payload, f"Tier reached: {tier}")

def trigger_unlock_alert(customer_id: str, tool: str, competency: str) -> bool:
    if not WEBHOOK_URL_TOOL_UNLOCKED:
        log.info("WEBHOOK_URL_TOOL_UNLOCKED is not set. Skipping.")
        return False
    payload = {
        "customer_id": customer_id,
        "tool": tool,
        "competency_achieved": competency,
    }
    return _post(WEBHOOK_URL_TOOL_UNLOCKED, payload, f"Tool unlocked: {tool}")
