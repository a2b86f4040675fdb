"""
Credential store: credentials.yaml with a single `api_token` field.

Reads are unsynchronized. Writes append one line and are only made by the
registration flow while it holds the credentials lock.
"""

import yaml

from .config import log
from .errors import StoreFailure


class CredentialStore:
    def __init__(self, path):
        self.path = path

    def read_token(self):
        """Return the stored token, or "" when there is none.

        A missing file means "not registered". A file that isn't valid YAML
        is treated the same way (logged, not raised). Raises StoreFailure
        when the file exists but can't be read.
        """
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return ""
        except OSError as e:
            raise StoreFailure(f"Error reading {self.path}: {e}") from e

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            log.warning("Credentials file %s is not valid YAML, ignoring it: %s", self.path, e)
            return ""

        if not isinstance(data, dict):
            return ""
        token = data.get("api_token")
        return str(token) if token else ""

    def append_token(self, token):
        """Append `api_token: <token>` and flush it to disk."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"api_token: {token}\n")
                f.flush()
        except OSError as e:
            raise StoreFailure(f"Error writing the api token to {self.path}: {e}") from e
        log.info("Api token saved to %s", self.path)
