"""
Server API calls — pulse delivery and the version check.

Both are best-effort: failures are logged and never raised, so the editor
that spawned us is never blocked or failed by the network.
"""

import json

import requests

from .constants import AGENT_BUILD, CLI_VERSION_URL, API_TIMEOUT_VERSION
from .config import log, pulse_api_url
from . import http_client


# ─── Pulses ──────────────────────────────────────────────────────

def build_pulse_request(pulses, token):
    """Return (url, headers, body) for a pulse upload."""
    body = json.dumps({"pulses": [p.to_dict() for p in pulses]})
    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {token}",
    }
    return pulse_api_url(), headers, body


def deliver(pulses, token, session=None):
    """POST pulses with the bearer token. Returns the status code or None.

    No token means the machine isn't registered yet: nothing is sent.
    """
    if not token:
        log.info("No api token yet, not sending %d pulses", len(pulses))
        return None

    url, headers, body = build_pulse_request(pulses, token)
    if session is None:
        session = http_client.create_session()

    try:
        resp = session.post(url, data=body, headers=headers)
    except requests.RequestException as e:
        log.warning("Pulse upload network error: %s", e)
        return None

    log.info("Request completed with status code: %d", resp.status_code)
    if resp.status_code >= 400:
        log.warning("Pulse upload failed: HTTP %d — %s", resp.status_code, resp.text[:500])
    return resp.status_code


# ─── Version check ───────────────────────────────────────────────

def check_for_updates(session=None):
    """Log when the server publishes a newer agent build. Returns the build or None."""
    if session is None:
        session = http_client.create_session()

    try:
        resp = session.get(CLI_VERSION_URL, timeout=API_TIMEOUT_VERSION)
        if resp.status_code != 200:
            log.warning("Version check failed: HTTP %d", resp.status_code)
            return None
        latest = int(resp.json()["version"])
    except requests.RequestException as e:
        log.warning("Version check network error: %s", e)
        return None
    except (ValueError, KeyError, TypeError) as e:
        log.warning("Version check returned an unexpected body: %s", e)
        return None

    if latest > AGENT_BUILD:
        log.info("A newer agent build is available: %d (running %d)", latest, AGENT_BUILD)
    return latest
