"""
Ingestion: stdin batch → IncomingEvents → Pulses.

The read is time-boxed. An editor that never closes its end of the pipe
must not hang the agent, so the blocking read runs on a daemon thread and
the caller waits on a queue with a timeout. A thread that loses the race is
simply abandoned; as a daemon it never holds up interpreter exit.
"""

import os
import json
import queue
import threading

from .constants import STDIN_DEADLINE_SEC
from .config import log, stdin_deadline
from .errors import PayloadReadError, PayloadTimeout, MalformedPayload
from .classifier import LanguageClassifier
from .pulses import IncomingEvent, build_pulses

# wire key → (IncomingEvent field, expected type)
_EVENT_FIELDS = {
    "filePath": ("file_path", str),
    "eventType": ("event_type", str),
    "eventDate": ("event_date", int),
    "editor": ("editor", str),
}
_READ_CHUNK = 65536


# ─── Time-boxed read ─────────────────────────────────────────────

def _read_fd(fd):
    chunks = []
    while True:
        chunk = os.read(fd, _READ_CHUNK)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)


def _reader_func(reader):
    """How the reader thread reads `reader`.

    Streams backed by a file descriptor are read with os.read(): a thread
    blocked inside a BufferedReader holds its lock, and the interpreter
    aborts when it can't take that lock to close stdin at shutdown.
    """
    try:
        fd = reader.fileno()
    except (AttributeError, OSError, ValueError):
        return reader.read
    return lambda: _read_fd(fd)


def read_payload(reader, deadline=STDIN_DEADLINE_SEC):
    """Read all of `reader` within `deadline` seconds. Returns bytes."""
    results = queue.Queue(maxsize=1)
    read_all = _reader_func(reader)

    def _read_all():
        try:
            results.put(("ok", read_all()))
        except Exception as e:
            results.put(("error", e))

    threading.Thread(target=_read_all, name="stdin-reader", daemon=True).start()

    try:
        status, value = results.get(timeout=deadline)
    except queue.Empty:
        raise PayloadTimeout(f"Timed out after {deadline}s reading the event batch") from None

    if status == "error":
        raise PayloadReadError(f"Error reading the event batch: {value}") from value
    if isinstance(value, str):
        value = value.encode("utf-8")
    return value


# ─── Deserialization ─────────────────────────────────────────────

def _event_from_json(index, item):
    if not isinstance(item, dict):
        raise MalformedPayload(f"Event {index} is not an object")

    kwargs = {}
    for key, (field, expected) in _EVENT_FIELDS.items():
        value = item.get(key)
        # bool is an int subclass, never a valid date
        if not isinstance(value, expected) or isinstance(value, bool):
            raise MalformedPayload(f"Event {index}: '{key}' missing or not a {expected.__name__}")
        kwargs[field] = value
    return IncomingEvent(**kwargs)


def parse_events(payload):
    """JSON array of events → list of IncomingEvent. All or nothing."""
    try:
        data = json.loads(payload)
    except (ValueError, UnicodeDecodeError) as e:
        raise MalformedPayload(f"Event batch is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise MalformedPayload("Event batch is not a JSON array")
    return [_event_from_json(i, item) for i, item in enumerate(data)]


# ─── Pipeline ────────────────────────────────────────────────────

def ingest(reader, classifier=None, deadline=None):
    """Read, parse, and convert one batch. Fatal errors propagate."""
    if deadline is None:
        deadline = stdin_deadline()
    payload = read_payload(reader, deadline)
    try:
        events = parse_events(payload)
    except MalformedPayload:
        log.error("Error building pulses from payload: %r", payload[:500])
        raise

    if classifier is None:
        classifier = LanguageClassifier()
    pulses = build_pulses(events, classifier)
    log.info("Built %d pulses from %d events", len(pulses), len(events))
    return pulses
