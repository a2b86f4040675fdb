"""
Device registration: obtain or mint this machine's api token exactly once.

Several editor windows may run the agent at the same moment. Minting is
guarded by a non-blocking file lock and a re-read of the store once the
lock is held, so at most one token is ever written for a machine.
"""

import uuid
import webbrowser

from .constants import REGISTRATION_URL, BAD_REGISTRATION_URL
from .config import log
from .errors import AlreadyRegistering, StoreFailure


# ─── Token acquisition ───────────────────────────────────────────

def acquire_token(store, lock):
    """Return the api token, minting one if the store has none.

    Raises AlreadyRegistering if another process holds the lock, and
    StoreFailure if the store (or its lock file) can't be used.
    """
    token = store.read_token()
    if token:
        return token

    try:
        locked = lock.try_acquire()
    except OSError as e:
        raise StoreFailure(f"Error opening the credentials lock file: {e}") from e

    if not locked:
        log.info("Another process has the credentials lock, it is probably registering")
        raise AlreadyRegistering("Another process is already registering this machine")

    try:
        # Another process may have minted between the first read and the lock
        token = store.read_token()
        if token:
            return token

        token = str(uuid.uuid4())
        store.append_token(token)
        log.info("Minted a new api token")
        return token
    finally:
        lock.release()


# ─── Register command ────────────────────────────────────────────

def registration_url(token):
    return f"{REGISTRATION_URL}?apiToken={token}"


def register(store, lock, open_url=webbrowser.open):
    """Acquire the token and send the user to the registration page.

    AlreadyRegistering propagates untouched; the caller decides how benign
    it is. On StoreFailure the failure page is opened before re-raising.
    """
    log.info("Registering this machine")
    try:
        token = acquire_token(store, lock)
    except StoreFailure:
        open_url(BAD_REGISTRATION_URL)
        raise

    open_url(registration_url(token))
    log.info("Registration page opened")
    return token
