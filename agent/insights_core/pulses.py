"""
IncomingEvent (from the editor) and Pulse (to the server), plus the
event → pulse conversion.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone

from .config import log
from .errors import FileReadError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class IncomingEvent:
    file_path: str
    event_type: str
    event_date: int      # epoch milliseconds
    editor: str


@dataclass(frozen=True)
class Pulse:
    type: str
    date: str
    programming_language: str
    editor: str

    def to_dict(self):
        """Wire form, camelCase keys."""
        data = asdict(self)
        data["programmingLanguage"] = data.pop("programming_language")
        return data


def format_event_date(millis):
    """
    RFC3339 timestamp with nanosecond precision, always UTC.

    Pure function of `millis`: the fraction has trailing zeros trimmed and
    is omitted entirely when zero (1 → "1970-01-01T00:00:00.001Z").
    """
    nanos = millis * 1_000_000
    seconds, frac_ns = divmod(nanos, 1_000_000_000)
    stamp = (_EPOCH + timedelta(seconds=seconds)).strftime("%Y-%m-%dT%H:%M:%S")
    frac = f"{frac_ns:09d}".rstrip("0")
    if frac:
        stamp += "." + frac
    return stamp + "Z"


def build_pulses(events, classifier):
    """One pulse per classifiable event, in input order.

    Events whose file can't be read are logged and dropped; one bad entry
    never aborts the batch.
    """
    pulses = []
    for event in events:
        try:
            language = classifier.classify(event.file_path)
        except FileReadError as e:
            log.warning("Couldn't determine the language of %s, dropping event: %s",
                        event.file_path, e.cause)
            continue

        pulses.append(Pulse(
            type=event.event_type,
            date=format_event_date(event.event_date),
            programming_language=language,
            editor=event.editor,
        ))
    return pulses
