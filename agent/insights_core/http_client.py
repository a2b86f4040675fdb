"""
HTTP session with connection pooling and an explicit CA bundle.

Delivery is best-effort per invocation, so the adapters are mounted with
retries disabled: one request, one answer.
"""

import os

import certifi
import requests
from requests.adapters import HTTPAdapter


def _get_ca_bundle():
    """Get the CA bundle path.

    Priority: env var → certifi.
    """
    env_ca = os.environ.get("REQUESTS_CA_BUNDLE") or os.environ.get("SSL_CERT_FILE")
    if env_ca and os.path.isfile(env_ca):
        return env_ca
    return certifi.where()


def create_session():
    """Create a new requests.Session with pooling and SSL, no retries."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=2,
        max_retries=0,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    return session
