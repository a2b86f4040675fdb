"""
LanguageClassifier: file path → programming language name, memoized per run.

Detection uses Pygments (filename patterns plus content analysis). When it
finds nothing, EXTENSION_OVERRIDES and then FALLBACK_LANGUAGE apply.
"""

import os

from pygments.lexers import guess_lexer_for_filename
from pygments.util import ClassNotFound

from .constants import EXTENSION_OVERRIDES, LEXER_NAME_OVERRIDES, FALLBACK_LANGUAGE
from .errors import FileReadError


def detect_language(path, content):
    """Pygments' lexer name for this file, or "" if nothing matches."""
    try:
        lexer = guess_lexer_for_filename(os.path.basename(path), content)
    except ClassNotFound:
        return ""
    return LEXER_NAME_OVERRIDES.get(lexer.name, lexer.name)


class LanguageClassifier:
    """
    One instance per ingestion run. Entries are never evicted and never
    re-validated against the file: the batch reflects file state at read time.
    """

    def __init__(self, detect=detect_language):
        self._detect = detect
        self._cache = {}

    def __len__(self):
        return len(self._cache)

    def __contains__(self, path):
        return path in self._cache

    def classify(self, path):
        """Return the language name. Raises FileReadError (not cached)."""
        language = self._cache.get(path)
        if language:
            return language

        content = self._read(path)
        language = self._detect(path, content)
        if not language:
            _, ext = os.path.splitext(path)
            language = EXTENSION_OVERRIDES.get(ext.lower(), FALLBACK_LANGUAGE)

        self._cache[path] = language
        return language

    def _read(self, path):
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise FileReadError(path, e) from e
        return raw.decode("utf-8", errors="replace")
