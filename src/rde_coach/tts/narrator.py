"""Prompt narration — speaks coaching prompts without repeating or crowding them."""

from __future__ import annotations

import time

from rde_coach.coaching.models import Emphasis, PromptOutput, PromptType


class PromptNarrator:
    """Turns the per-tick :class:`PromptOutput` stream into occasional speech.

    A prompt is spoken only when its identity differs from the last spoken
    one and at least *silence_s* seconds have passed since the last
    utterance. A validity prompt with negative emphasis skips the silence
    window and interrupts current speech at elevated priority.

    Parameters
    ----------
    tts_engine:
        Object with ``speak(text, priority)`` and ``stop()``.
    silence_s:
        Minimum seconds between consecutive utterances.
    _time_fn:
        Callable returning monotonic time; injectable for testing.
    """

    def __init__(self, tts_engine, silence_s: float = 5.0, _time_fn=time.monotonic) -> None:
        self._tts = tts_engine
        self._silence_s = silence_s
        self._time_fn = _time_fn
        self._last_spoken: float = float("-inf")
        self._last_identity: tuple[PromptType, str] | None = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle(self, output: PromptOutput) -> bool:
        """Speak *output* if allowed; return True when something was spoken."""
        if not output.text or output.identity == self._last_identity:
            return False

        if _is_alarm(output):
            self.interrupt(_utterance(output))
            self._last_identity = output.identity
            return True

        now = self._time_fn()
        if now - self._last_spoken < self._silence_s:
            return False

        self._tts.speak(_utterance(output))
        self._last_spoken = now
        self._last_identity = output.identity
        return True

    def interrupt(self, text: str) -> None:
        """Stop ongoing speech, reset the silence timer and speak *text* at priority 1."""
        self._tts.stop()
        self._tts.speak(text, priority=1)
        self._last_spoken = self._time_fn()


# ----------------------------------------------------------------------
# Internal
# ----------------------------------------------------------------------


def _is_alarm(output: PromptOutput) -> bool:
    return (
        output.prompt_type is PromptType.INVALID_RDE_REASON
        and output.emphasis is Emphasis.NEGATIVE
    )


def _utterance(output: PromptOutput) -> str:
    if output.analysis_text:
        return f"{output.text} {output.analysis_text}"
    return output.text
