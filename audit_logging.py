"""
Audit trail
audit_logging.py - who did what to which listing

Records go to the `estato.audit` logger, which the app factory routes into
the rotating log file. There is no audit table: the hosted database schema is
not ours to extend.
"""

from datetime import datetime, timezone
from typing import Any, Optional, Dict
import json
import logging

from flask import g, has_request_context, request

audit_logger = logging.getLogger("estato.audit")


# ============================================================================
#  REQUEST CONTEXT HELPERS
# ============================================================================

def get_client_ip():
    """Client IP address (Cloudflare header first)."""
    if request.environ.get("HTTP_CF_CONNECTING_IP"):
        return request.environ.get("HTTP_CF_CONNECTING_IP")
    return request.remote_addr


def get_user_agent():
    """Client User-Agent, truncated."""
    return request.headers.get("User-Agent", "")[:500]


def get_current_user() -> Optional[str]:
    """E-mail of the signed-in user, if any."""
    auth_session = g.get("auth_session")
    return auth_session.email if auth_session else None


# ============================================================================
#  AUDIT RECORDS
# ============================================================================

def log_action(
    action: str,
    entity_type: str,
    entity_id: Optional[int] = None,
    old_values: Optional[Dict[str, Any]] = None,
    new_values: Optional[Dict[str, Any]] = None,
    description: Optional[str] = None,
    status: str = "success",
    error_message: Optional[str] = None,
    user: Optional[str] = None,
):
    """
    Write one audit record.

    Args:
        action: CREATE, DELETE, LOGIN, LOGOUT, ...
        entity_type: what the action touched (Property, User)
        entity_id: id of the touched record
        old_values: values before the change
        new_values: values after the change
        description: free text
        status: success / failure
        error_message: reason when status=failure
        user: acting user; defaults to the signed-in user
    """
    record = {
        "at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "user": user or get_current_user(),
        "action": action,
        "entity_type": entity_type,
        "entity_id": entity_id,
        "description": description,
        "old_values": old_values,
        "new_values": new_values,
        "status": status,
        "error_message": error_message,
    }
    if has_request_context():
        record["ip_address"] = get_client_ip()
        record["user_agent"] = get_user_agent()

    level = logging.INFO if status == "success" else logging.WARNING
    audit_logger.log(level, json.dumps(record, default=str, ensure_ascii=False))


def log_login(email: str, success: bool = True, error_msg: Optional[str] = None):
    """Record a sign-in attempt."""
    log_action(
        action="LOGIN",
        entity_type="User",
        description=f"Password sign-in: {email}",
        status="success" if success else "failure",
        error_message=error_msg,
        user=email,
    )


def log_logout(email: Optional[str] = None):
    """Record a sign-out."""
    log_action(action="LOGOUT", entity_type="User", user=email)


def on_auth_event(event: str, auth_session) -> None:
    """AuthContext listener: audit every sign-in and sign-out."""
    if event == "SIGNED_IN":
        log_login(auth_session.email, success=True)
    elif event == "SIGNED_OUT":
        log_logout(auth_session.email if auth_session else None)
