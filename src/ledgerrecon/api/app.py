"""
HTTP API for the ledgerrecon reconciliation engine.
Runs as a Flask app (e.g. behind gunicorn: ``gunicorn ledgerrecon.api.app:app``).

Endpoints:
    GET  /health    Health check
    GET  /profiles  Available reconciliation profiles
    GET  /sample    Reconcile the built-in sample datasets
    POST /reconcile Reconcile two datasets sent in the request body

POST /reconcile body:
    {
        "left":  {"name": "ledger.csv", "rows": [{...}, ...]}   # or a bare list of rows
        "right": {"name": "bank.csv", "text": "Invoice ID,Amount\\n..."},
        "profile": "INVOICE",                                    # optional
        "key_columns": ["Invoice ID"], "tolerance": 10, "tolerance_mode": "absolute"
    }
"""

from datetime import datetime
from typing import Any, Tuple

from flask import Flask, request

from ledgerrecon import __version__
from ledgerrecon.core.ingestion.parser import DatasetParseError, parse_delimited_text
from ledgerrecon.core.logging_config import get_logger
from ledgerrecon.core.recon.models import Dataset
from ledgerrecon.core.recon.profiles import get_available_profiles, get_profile
from ledgerrecon.core.recon.run_reconciliation import run_reconciliation
from ledgerrecon.core.sample_data import generate_sample_datasets

logger = get_logger(__name__)

app = Flask(__name__)


class RequestError(ValueError):
    """Raised when a request body is malformed."""


def _dataset_from_payload(payload: Any, default_name: str) -> Dataset:
    """Accept a bare row list, {"name", "rows"} or {"name", "text"}."""
    if isinstance(payload, list):
        return Dataset.from_rows(_check_rows(payload, default_name), name=default_name)

    if not isinstance(payload, dict):
        raise RequestError(f"'{default_name}' must be a list of rows or an object")

    name = payload.get("name") or default_name
    if "text" in payload:
        return parse_delimited_text(str(payload["text"]), name=name, delimiter=payload.get("delimiter"))
    if "rows" in payload:
        return Dataset.from_rows(_check_rows(payload["rows"], name), name=name)
    raise RequestError(f"'{default_name}' needs either 'rows' or 'text'")


def _check_rows(rows: Any, name: str) -> list:
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise RequestError(f"Rows for '{name}' must be a list of objects")
    return rows


def _envelope_to_json(envelope: dict) -> dict:
    body = dict(envelope)
    recon = body.get("result")
    body["result"] = recon.to_dict() if recon is not None else None
    return body


def _error(message: str, status: int) -> Tuple[dict, int]:
    return {
        'error': 'Bad request' if status < 500 else 'Internal server error',
        'message': message,
        'timestamp': datetime.now().isoformat(),
    }, status


@app.route('/reconcile', methods=['POST'])
def reconcile_endpoint():
    """Reconcile the two datasets in the request body."""
    try:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            raise RequestError("Request body must be a JSON object")
        if "left" not in body or "right" not in body:
            raise RequestError("Both 'left' and 'right' datasets are required")

        left = _dataset_from_payload(body["left"], "left")
        right = _dataset_from_payload(body["right"], "right")
        params = {k: v for k, v in body.items() if k not in ("left", "right")}

        envelope = run_reconciliation(left, right, params)
        status_code = 400 if envelope['status'] == 'ERROR' else 200
        return _envelope_to_json(envelope), status_code

    except (RequestError, DatasetParseError) as e:
        return _error(str(e), 400)
    except Exception as e:
        logger.exception(f"Reconcile handler error: {e}")
        return _error(str(e), 500)


@app.route('/sample', methods=['GET'])
def sample():
    """Reconcile the built-in sample ledger and statement."""
    ledger, statement, config = generate_sample_datasets()
    envelope = run_reconciliation(ledger, statement, config.to_dict())
    return _envelope_to_json(envelope), 200


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return {
        'status': 'healthy',
        'service': 'ledgerrecon',
        'version': __version__,
        'timestamp': datetime.now().isoformat()
    }, 200


@app.route('/profiles', methods=['GET'])
def list_profiles():
    """Returns the available reconciliation profiles."""
    profiles = []
    for name in get_available_profiles():
        try:
            profile, profile_hash = get_profile(name)
        except (FileNotFoundError, ValueError) as e:
            logger.warning(f"Skipping invalid profile {name}: {e}")
            continue
        profiles.append({**profile.to_dict(), 'hash': profile_hash})
    return {'profiles': profiles, 'total_profiles': len(profiles)}, 200
