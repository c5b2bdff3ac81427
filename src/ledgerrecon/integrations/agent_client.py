"""
Client for the external analysis, report and notification services.

Each service is an agent behind one HTTP endpoint: the client posts a text
message with the agent id and receives an opaque JSON payload. Responses are
normalised into ``AgentResponse``; transport and protocol failures come back
as ``success=False`` with a human-readable message.

Configuration (environment):
    LEDGERRECON_AGENT_URL       Endpoint that accepts {"message", "agent_id"}
    LEDGERRECON_AGENT_API_KEY   Bearer token (optional)
    LEDGERRECON_AGENT_TIMEOUT   Request timeout in seconds (default: 60)

Usage:
    client = AgentClient.from_env()
    analysis = analyze_results(client, result, config, "ledger.csv", "bank.csv")
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from ledgerrecon.core.recon.models import ReconciliationConfig, ReconciliationResult
from ledgerrecon.reporting.summaries import (
    build_analysis_message,
    build_email_message,
    build_report_message,
)


logger = logging.getLogger(__name__)


RECONCILIATION_ANALYST_AGENT_ID = os.getenv("LEDGERRECON_ANALYST_AGENT_ID", "reconciliation-analyst")
REPORT_EXPORT_AGENT_ID = os.getenv("LEDGERRECON_REPORT_AGENT_ID", "report-export")
EMAIL_NOTIFICATION_AGENT_ID = os.getenv("LEDGERRECON_EMAIL_AGENT_ID", "email-notification")

DEFAULT_TIMEOUT = 60.0


class AgentCallError(RuntimeError):
    """Raised by the service wrappers when an agent call does not succeed."""


@dataclass
class AgentResponse:
    success: bool
    result: Dict[str, Any] = field(default_factory=dict)
    message: Optional[str] = None
    artifact_files: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class AnalysisResult:
    summary: str = ""
    match_rate: str = ""
    key_findings: str = ""
    anomalies: str = ""
    missing_records_analysis: str = ""
    variance_analysis: str = ""
    recommendations: str = ""


@dataclass
class ExportResult:
    report_summary: str = ""
    sections_included: str = ""
    total_records_processed: str = ""
    report_status: str = ""
    file_url: str = ""


@dataclass
class EmailResult:
    email_status: str
    recipient: str
    subject: str
    delivery_message: str


class AgentClient:
    """Thin HTTP client for agent calls."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("Agent endpoint URL is required")
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_env(cls) -> "AgentClient":
        """Build a client from LEDGERRECON_AGENT_* environment variables."""
        url = os.getenv("LEDGERRECON_AGENT_URL")
        if not url:
            raise ValueError("LEDGERRECON_AGENT_URL is not set")
        timeout_raw = os.getenv("LEDGERRECON_AGENT_TIMEOUT")
        try:
            timeout = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT
        except ValueError:
            logger.warning(f"Invalid LEDGERRECON_AGENT_TIMEOUT={timeout_raw}, using {DEFAULT_TIMEOUT}")
            timeout = DEFAULT_TIMEOUT
        return cls(url, api_key=os.getenv("LEDGERRECON_AGENT_API_KEY"), timeout=timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def call(self, message: str, agent_id: str) -> AgentResponse:
        """
        Send a message to an agent.

        Returns:
            AgentResponse; never raises for network or protocol failures.
        """
        payload = {"message": message, "agent_id": agent_id}
        try:
            r = self.session.post(self.base_url, json=payload, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Agent call to {agent_id} failed: {e}")
            return AgentResponse(success=False, message=str(e))

        try:
            body = r.json()
        except ValueError:
            logger.error(f"Agent {agent_id} returned a non-JSON body (HTTP {r.status_code})")
            return AgentResponse(success=False, message=f"Invalid response from agent (HTTP {r.status_code})")

        if not isinstance(body, dict):
            return AgentResponse(success=False, message="Invalid response from agent")

        response = body.get("response") or {}
        if not isinstance(response, dict):
            response = {}
        module_outputs = body.get("module_outputs") or {}
        artifacts = module_outputs.get("artifact_files") if isinstance(module_outputs, dict) else None

        if not r.ok or not body.get("success", False):
            message = response.get("message") or body.get("error")
            if not r.ok and not message:
                message = f"HTTP {r.status_code}"
            logger.warning(f"Agent {agent_id} reported failure: {message}")
            return AgentResponse(success=False, message=message)

        result = response.get("result")
        return AgentResponse(
            success=True,
            result=result if isinstance(result, dict) else {},
            message=response.get("message"),
            artifact_files=artifacts if isinstance(artifacts, list) else [],
        )


def analyze_results(
    client: AgentClient,
    result: ReconciliationResult,
    config: ReconciliationConfig,
    left_name: str = "File 1",
    right_name: str = "File 2",
    left_rows: int = 0,
    right_rows: int = 0,
) -> AnalysisResult:
    """Ask the analysis service for a commentary on the result."""
    message = build_analysis_message(result, config, left_name, right_name, left_rows, right_rows)
    response = client.call(message, RECONCILIATION_ANALYST_AGENT_ID)
    if not response.success:
        raise AgentCallError(response.message or "Analysis failed. Please try again.")

    data = response.result
    return AnalysisResult(
        summary=data.get("summary") or "",
        match_rate=data.get("match_rate") or "",
        key_findings=data.get("key_findings") or "",
        anomalies=data.get("anomalies") or "",
        missing_records_analysis=data.get("missing_records_analysis") or "",
        variance_analysis=data.get("variance_analysis") or "",
        recommendations=data.get("recommendations") or "",
    )


def export_report(
    client: AgentClient,
    result: ReconciliationResult,
    config: ReconciliationConfig,
    left_name: str = "File 1",
    right_name: str = "File 2",
) -> ExportResult:
    """Ask the report service to generate a report file."""
    message = build_report_message(result, config, left_name, right_name)
    response = client.call(message, REPORT_EXPORT_AGENT_ID)
    if not response.success:
        raise AgentCallError(response.message or "Export failed. Please try again.")

    data = response.result
    first_file = response.artifact_files[0] if response.artifact_files else {}
    return ExportResult(
        report_summary=data.get("report_summary") or "",
        sections_included=data.get("sections_included") or "",
        total_records_processed=str(data.get("total_records_processed") or ""),
        report_status=data.get("report_status") or "",
        file_url=(first_file or {}).get("file_url") or "",
    )


def send_email(
    client: AgentClient,
    result: ReconciliationResult,
    recipient: str,
    subject: Optional[str] = None,
    left_name: str = "File 1",
    right_name: str = "File 2",
) -> EmailResult:
    """Ask the notification service to email a summary of the result."""
    if not recipient or not recipient.strip():
        raise ValueError("A recipient email address is required")

    subject_line, message = build_email_message(result, recipient, subject, left_name, right_name)
    response = client.call(message, EMAIL_NOTIFICATION_AGENT_ID)
    if not response.success:
        raise AgentCallError(response.message or "Email sending failed. Please try again.")

    data = response.result
    return EmailResult(
        email_status=data.get("email_status") or "sent",
        recipient=data.get("recipient") or recipient,
        subject=data.get("subject") or subject_line,
        delivery_message=data.get("delivery_message") or "Email sent successfully.",
    )


__all__ = [
    "AgentCallError",
    "AgentClient",
    "AgentResponse",
    "AnalysisResult",
    "EmailResult",
    "ExportResult",
    "analyze_results",
    "export_report",
    "send_email",
]
