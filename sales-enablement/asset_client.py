# sales-enablement/asset_client.py
import json
import logging
import requests
from typing import Dict, Optional
from urllib.parse import quote

import config

log = logging.getLogger(__name__)

ASSETS_TABLE = "Customer Assets"

JSON_FIELDS = {
    "icpContent": "ICP Content",
    "costCalculatorContent": "Cost Calculator Content",
    "businessCaseContent": "Business Case Content",
    "toolAccessStatus": "Tool Access Status",
}

BASELINE_FIELDS = {
    "customer_analysis": "Baseline Customer Analysis",
    "value_communication": "Baseline Value Communication",
    "sales_execution": "Baseline Sales Execution",
}

CURRENT_FIELDS = {
    "customer_analysis": "Current Customer Analysis",
    "value_communication": "Current Value Communication",
    "sales_execution": "Current Sales Execution",
}

def _handle_request_exception(e: requests.exceptions.RequestException, context: str):
    error_message = f"Error during '{context}': {e}"
    if e.response is not None:
        error_message += f" | Status: {e.response.status_code} | Response: {e.response.text}"
    log.error(error_message)
    return None

def _parse_json_field(value):
    if not value or not isinstance(value, str):
        return value or None
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        log.warning("Unparseable JSON field in customer assets, keeping raw text.")
        return value

def _float_or_none(value) -> Optional[float]:
    try:
        return float(value) if value is not None and value != "" else None
    except (TypeError, ValueError):
        return None

def get_customer_assets(record_id: str, access_token: str) -> Dict:
    """
    Fetches one customer's asset record. Returns {} when the record cannot be
    fetched or does not belong to the given access token.
    """
    url = f"{config.ASSET_STORE_URL}/{quote(ASSETS_TABLE)}/{record_id}"
    headers = {"Authorization": f"Bearer {config.ASSET_STORE_API_KEY}"}
    try:
        response = requests.get(url, headers=headers, timeout=30)
        response.raise_for_status()
        record = response.json() or {}
    except requests.exceptions.RequestException as e:
        _handle_request_exception(e, f"get customer assets {record_id}")
        return {}

    fields = record.get("fields", {})
    if fields.get("Access Token") != access_token:
        log.warning("Access token does not match customer assets record %s", record_id)
        return {}

    assets = {
        "recordId": record.get("id", record_id),
        "customerId": fields.get("Customer ID"),
        "customerName": fields.get("Customer Name"),
    }
    for key, field_name in JSON_FIELDS.items():
        assets[key] = _parse_json_field(fields.get(field_name))
    assets["baseline"] = {key: _float_or_none(fields.get(name)) for key, name in BASELINE_FIELDS.items()}
    assets["current"] = {key: _float_or_none(fields.get(name)) for key, name in CURRENT_FIELDS.items()}
    return assets

def competency_baseline(assets: Dict) -> Dict[str, float]:
    """Baseline scores from an assets record, falling back to current scores, then 0."""
    baseline = assets.get("baseline") or {}
    current = assets.get("current") or {}
    scores = {}
    for key in BASELINE_FIELDS:
        value = baseline.get(key)
        if value is None:
            value = current.get(key)
        scores[key] = value or 0.0
    return scores
