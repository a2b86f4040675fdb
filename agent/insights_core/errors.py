"""
Agent error taxonomy.

Every fatal condition is an AgentError carrying the exit code the process
ends with. Only runner.main() turns these into a process exit.
"""

from .constants import (
    EXIT_UNKNOWN_ERROR, EXIT_INSTALL_DIR, EXIT_STORE_FAILURE,
    EXIT_STDIN_READ, EXIT_STDIN_TIMEOUT, EXIT_BAD_PAYLOAD, EXIT_ALREADY_REGISTERING,
)


class AgentError(Exception):
    exit_code = EXIT_UNKNOWN_ERROR


class InstallDirError(AgentError):
    """Install directory can't be resolved or created."""
    exit_code = EXIT_INSTALL_DIR


class StoreFailure(AgentError):
    """Credential store can't be read or written."""
    exit_code = EXIT_STORE_FAILURE


class AlreadyRegistering(AgentError):
    """Another invocation holds the credentials lock right now."""
    exit_code = EXIT_ALREADY_REGISTERING


class PayloadReadError(AgentError):
    exit_code = EXIT_STDIN_READ


class PayloadTimeout(AgentError):
    exit_code = EXIT_STDIN_TIMEOUT


class MalformedPayload(AgentError):
    exit_code = EXIT_BAD_PAYLOAD


class FileReadError(AgentError):
    """Source file of an event couldn't be read for classification."""

    def __init__(self, path, cause):
        super().__init__(f"Can't read {path}: {cause}")
        self.path = path
        self.cause = cause
