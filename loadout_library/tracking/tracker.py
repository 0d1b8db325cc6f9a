"""Change tracker holding the two most recent compiled scripts.

A recompilation whose fingerprint matches the current one leaves the
(current, previous) pair untouched; anything else demotes current to
previous. The history is an immutable value, and ChangeTracker swaps it
under a lock so readers never see a half-updated pair.
"""

import hashlib
import logging
import threading
from dataclasses import dataclass

from ..models.fragments import CompiledScript
from .differ import LineDiff

logger = logging.getLogger(__name__)


def text_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class CompilationHistory:
    """The two most recent compiled texts.

    Attributes:
        current: Most recent text
        previous: Text before the most recent change
        current_hash: Fingerprint of ``current``
    """

    current: str | None = None
    previous: str | None = None
    current_hash: str | None = None

    def record(self, text: str, fingerprint: str | None = None) -> "CompilationHistory":
        """Return the history after a compilation.

        Args:
            text: Newly compiled text
            fingerprint: Hash identifying the text's content; defaults to the
                sha256 of ``text``

        Returns:
            ``self`` if the fingerprint is unchanged, otherwise a new history
            with the old current demoted to previous
        """
        fingerprint = fingerprint or text_hash(text)
        if fingerprint == self.current_hash:
            return self
        return CompilationHistory(current=text, previous=self.current, current_hash=fingerprint)

    def diff(self) -> LineDiff:
        return LineDiff(self.previous or "", self.current or "")


class ChangeTracker:
    """Thread-safe owner of a CompilationHistory."""

    def __init__(self, history: CompilationHistory | None = None) -> None:
        self._history = history or CompilationHistory()
        self._lock = threading.Lock()

    @property
    def history(self) -> CompilationHistory:
        return self._history

    def record_text(self, text: str, fingerprint: str | None = None) -> bool:
        """Record a compiled text.

        Returns:
            True if the (current, previous) pair changed
        """
        with self._lock:
            updated = self._history.record(text, fingerprint)
            changed = updated is not self._history
            self._history = updated
        if changed:
            logger.debug(f"Tracked new script {updated.current_hash[:12]}")
        return changed

    def record(self, script: CompiledScript) -> bool:
        """Record a CompiledScript, ignoring its generation timestamp."""
        return self.record_text(script.text, script.fingerprint)

    def diff(self) -> LineDiff:
        """Diff of the previous script against the current one."""
        return self._history.diff()

    def reset(self) -> None:
        with self._lock:
            self._history = CompilationHistory()
