"""
Constants, deadlines, endpoints, file names, and exit codes.
"""

AGENT_VERSION = "1.0.0"
AGENT_BUILD = 1                 # Compared against the server's published build

# ─── Ingestion ───────────────────────────────────────────────────
STDIN_DEADLINE_SEC = 10.0       # Editor must close its write side within 10s

# ─── Network ─────────────────────────────────────────────────────
PULSE_API_URL = "https://app.pluralsight.com/wsd/api/ps-time/pulse"
CLI_VERSION_URL = "https://app.pluralsight.com/wsd/api/ps-time/version"
REGISTRATION_URL = "https://app.pluralsight.com/id?redirectTo=https://app.pluralsight.com/wsd/api/ps-time/register"
BAD_REGISTRATION_URL = "https://app.pluralsight.com/id?redirectTo=https://app.pluralsight.com/activity-insights-beta?error=unsuccessful-registration"
DASHBOARD_URL = "https://app.pluralsight.com/activity-insights-beta/"
API_TIMEOUT_VERSION = 10        # Seconds, version check only

# ─── Files (all inside the install dir) ──────────────────────────
INSTALL_DIR_NAME = ".activity-insights"
CRED_FILE_NAME = "credentials.yaml"
LOCK_FILE_NAME = "credentials.yaml.lock"
LOG_FILE_NAME = "activity-insights.logs"
LOG_MAX_BYTES = 100_000         # Log is truncated at exit past this size

# ─── Language detection ──────────────────────────────────────────
# Consulted only when content/filename detection finds nothing.
EXTENSION_OVERRIDES = {
    ".vsct": "XML",
}
# Pygments display names that differ from the labels the service expects
LEXER_NAME_OVERRIDES = {
    "Text only": "Text",
}
FALLBACK_LANGUAGE = "Other"

# ─── Exit codes ──────────────────────────────────────────────────
EXIT_OK = 0
EXIT_INSTALL_DIR = 10
EXIT_STDIN_READ = 20
EXIT_STDIN_TIMEOUT = 21
EXIT_BAD_PAYLOAD = 22
EXIT_STORE_FAILURE = 30
EXIT_ALREADY_REGISTERING = 31
EXIT_UNKNOWN_ERROR = 1
