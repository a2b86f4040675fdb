"""Tests for the time-boxed read, batch parsing, and ingest()."""

import io
import os
import json
import threading
import time

import pytest

from insights_core.config import stdin_deadline
from insights_core.constants import STDIN_DEADLINE_SEC
from insights_core.errors import MalformedPayload, PayloadReadError, PayloadTimeout
from insights_core.ingestion import ingest, parse_events, read_payload
from insights_core.pulses import IncomingEvent, Pulse

from conftest import FakeClassifier


class NeverEndingReader:
    """A pipe the editor never writes to and never closes."""

    def __init__(self):
        self.release = threading.Event()

    def read(self):
        self.release.wait()
        return b""


class BrokenReader:
    def read(self):
        raise OSError("bad file descriptor")


def _batch(*events):
    return json.dumps(list(events)).encode("utf-8")


def _raw_event(path="a.ts", event_type="typing", date=1, editor="Vim"):
    return {"filePath": path, "eventType": event_type, "eventDate": date, "editor": editor}


class TestReadPayload:
    def test_reads_whole_stream(self):
        assert read_payload(io.BytesIO(b"[1, 2, 3]"), deadline=5) == b"[1, 2, 3]"

    def test_text_streams_are_encoded(self):
        assert read_payload(io.StringIO("[]"), deadline=5) == b"[]"

    def test_silent_stream_times_out_within_deadline(self):
        reader = NeverEndingReader()
        start = time.monotonic()
        try:
            with pytest.raises(PayloadTimeout):
                read_payload(reader, deadline=0.2)
        finally:
            reader.release.set()
        assert time.monotonic() - start < 2.0

    def test_read_errors_are_reported(self):
        with pytest.raises(PayloadReadError):
            read_payload(BrokenReader(), deadline=5)

    def test_reads_from_a_real_pipe(self):
        read_fd, write_fd = os.pipe()
        os.write(write_fd, b'[{"a": 1}]')
        os.close(write_fd)
        with os.fdopen(read_fd, "rb") as reader:
            assert read_payload(reader, deadline=5) == b'[{"a": 1}]'

    def test_open_pipe_times_out_and_reader_ends_with_the_writer(self):
        read_fd, write_fd = os.pipe()
        reader = os.fdopen(read_fd, "rb")
        try:
            with pytest.raises(PayloadTimeout):
                read_payload(reader, deadline=0.2)
        finally:
            os.close(write_fd)
            _wait_for_reader_threads()
            reader.close()
        assert not _reader_threads()


def _reader_threads():
    return [t for t in threading.enumerate() if t.name == "stdin-reader"]


def _wait_for_reader_threads(timeout=5.0):
    end = time.monotonic() + timeout
    while _reader_threads() and time.monotonic() < end:
        time.sleep(0.05)


class TestDeadlineOverride:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("ACTIVITY_INSIGHTS_STDIN_DEADLINE", "0.25")
        assert stdin_deadline() == 0.25

    @pytest.mark.parametrize("raw", ["", "soon", "0", "-3"])
    def test_invalid_values_use_default(self, monkeypatch, raw):
        monkeypatch.setenv("ACTIVITY_INSIGHTS_STDIN_DEADLINE", raw)
        assert stdin_deadline() == STDIN_DEADLINE_SEC

    def test_ingest_uses_env_deadline(self, monkeypatch):
        monkeypatch.setenv("ACTIVITY_INSIGHTS_STDIN_DEADLINE", "0.2")
        reader = NeverEndingReader()
        start = time.monotonic()
        try:
            with pytest.raises(PayloadTimeout):
                ingest(reader, classifier=FakeClassifier({}))
        finally:
            reader.release.set()
        assert time.monotonic() - start < 2.0


class TestParseEvents:
    def test_parses_events_in_order(self):
        payload = _batch(_raw_event("a.ts", date=1), _raw_event("b.py", "saveFile", 2, "Code"))
        assert parse_events(payload) == [
            IncomingEvent("a.ts", "typing", 1, "Vim"),
            IncomingEvent("b.py", "saveFile", 2, "Code"),
        ]

    def test_empty_array(self):
        assert parse_events(b"[]") == []

    @pytest.mark.parametrize("payload", [
        b"",
        b"not json",
        b'{"filePath": "a.ts"}',
        b"[1]",
        b'[{"filePath": "a.ts", "eventType": "typing", "editor": "Vim"}]',
        b'[{"filePath": "a.ts", "eventType": "typing", "eventDate": "1", "editor": "Vim"}]',
        b'[{"filePath": "a.ts", "eventType": "typing", "eventDate": true, "editor": "Vim"}]',
        b'[{"filePath": 7, "eventType": "typing", "eventDate": 1, "editor": "Vim"}]',
    ])
    def test_malformed_batches_are_rejected(self, payload):
        with pytest.raises(MalformedPayload):
            parse_events(payload)

    def test_one_bad_entry_rejects_the_whole_batch(self):
        payload = _batch(_raw_event(), {"filePath": "b.ts"})
        with pytest.raises(MalformedPayload):
            parse_events(payload)


class TestIngest:
    def test_single_event_end_to_end(self):
        classifier = FakeClassifier({"a.ts": "TypeScript"})
        pulses = ingest(io.BytesIO(_batch(_raw_event())), classifier=classifier, deadline=5)
        assert pulses == [Pulse(
            type="typing",
            date="1970-01-01T00:00:00.001Z",
            programming_language="TypeScript",
            editor="Vim",
        )]

    def test_unclassifiable_events_are_dropped(self):
        classifier = FakeClassifier({"a.ts": "TypeScript"})
        payload = _batch(_raw_event("gone.ts"), _raw_event("a.ts", date=5))
        pulses = ingest(io.BytesIO(payload), classifier=classifier, deadline=5)
        assert [p.date for p in pulses] == ["1970-01-01T00:00:00.005Z"]

    def test_real_classifier_by_default(self, tmp_path):
        source = tmp_path / "tool.py"
        source.write_text("import sys\n")
        payload = _batch(_raw_event(str(source)))
        pulses = ingest(io.BytesIO(payload), deadline=5)
        assert [p.programming_language for p in pulses] == ["Python"]

    def test_malformed_batch_propagates(self):
        with pytest.raises(MalformedPayload):
            ingest(io.BytesIO(b"{"), classifier=FakeClassifier({}), deadline=5)
