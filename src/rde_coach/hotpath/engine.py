"""CoachingEngine — connects TickEventStream to the session and the narrator."""

from __future__ import annotations

from rde_coach.coaching.models import PromptOutput


class CoachingEngine:
    """Integrates the event stream, the coaching session and speech output.

    The engine is the only writer of the session: everything that reaches
    it goes through :meth:`tick`, one event at a time.

    Parameters
    ----------
    stream:
        A :class:`~rde_coach.hotpath.event_stream.TickEventStream`.
    session:
        A :class:`~rde_coach.coaching.session.RdeSession`.
    narrator:
        An object with ``handle(output)`` — usually
        :class:`~rde_coach.tts.narrator.PromptNarrator` — or None for silence.
    """

    def __init__(self, stream, session, narrator=None) -> None:
        self._stream = stream
        self._session = session
        self._narrator = narrator
        self._processed = 0

    def start(self) -> None:
        """Start the underlying tick stream."""
        self._stream.start()

    def stop(self) -> None:
        """Stop the underlying tick stream."""
        self._stream.stop()

    @property
    def processed(self) -> int:
        """Number of ticks fed into the session so far."""
        return self._processed

    def tick(self) -> PromptOutput | None:
        """Process one event from the queue.

        Returns the prompt produced for it, or None if no event was available.
        """
        event = self._stream.get_event(timeout=0.0)
        if event is None:
            return None

        output = self._session.update(event.tick)
        self._processed += 1
        if self._narrator is not None:
            self._narrator.handle(output)
        return output
