"""
Entry point and command dispatch.

    activity-insights             read a batch from stdin, send pulses
    activity-insights register    mint/obtain the token, open registration
    activity-insights dashboard   open the dashboard

main() is the only place that turns an AgentError into an exit status.
"""

import sys
import webbrowser

from .constants import AGENT_VERSION, DASHBOARD_URL, EXIT_OK, EXIT_UNKNOWN_ERROR
from .config import (
    log, safe_print, get_install_dir, setup_logging, truncate_log_if_large,
    credentials_file, lock_file,
)
from .errors import AgentError, AlreadyRegistering
from .credentials import CredentialStore
from .file_lock import CredentialsLock
from .enrollment import register
from .ingestion import ingest
from .api import deliver, check_for_updates
from . import http_client


def pulse_command(install_dir, stdin, session):
    log.info("Starting pulse command")
    pulses = ingest(stdin)
    token = CredentialStore(credentials_file(install_dir)).read_token()
    deliver(pulses, token, session=session)


def register_command(install_dir, open_url):
    log.info("Starting register command")
    store = CredentialStore(credentials_file(install_dir))
    lock = CredentialsLock(lock_file(install_dir))
    try:
        register(store, lock, open_url=open_url)
    except AlreadyRegistering as e:
        # Whoever holds the lock finishes the job; a later run can retry
        log.info("Registration skipped: %s. Try again later.", e)


def dashboard_command(open_url):
    log.info("Starting dashboard command")
    open_url(DASHBOARD_URL)


def main(argv=None, stdin=None, session=None, open_url=webbrowser.open):
    """Run one command. Returns the process exit status."""
    args = sys.argv[1:] if argv is None else argv
    command = args[0] if args else "pulse"

    try:
        install_dir = get_install_dir()
        setup_logging(install_dir)
    except AgentError as e:
        safe_print(f"activity-insights: {e}")
        return e.exit_code

    log.info("Activity Insights agent v%s", AGENT_VERSION)

    if session is None:
        session = http_client.create_session()

    exit_code = EXIT_OK
    try:
        if command == "register":
            register_command(install_dir, open_url)
        elif command == "dashboard":
            dashboard_command(open_url)
        else:
            pulse_command(install_dir, stdin if stdin is not None else sys.stdin.buffer, session)
        check_for_updates(session)
    except AgentError as e:
        log.error("%s command failed: %s", command, e)
        exit_code = e.exit_code
    except Exception as e:
        log.error("%s command crashed: %s", command, e, exc_info=True)
        exit_code = EXIT_UNKNOWN_ERROR
    finally:
        session.close()
        truncate_log_if_large(install_dir)

    return exit_code


def run():
    """Console script entry."""
    sys.exit(main())
