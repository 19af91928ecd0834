"""Host-facing controller for one lesson attempt."""
import logging
from typing import Callable, List, Optional, Protocol

from vocabmaster import monitoring
from vocabmaster.models.errors import InvalidInvocation, TransportFailure
from vocabmaster.models.lesson_models import Lesson, LessonPhase, SessionSnapshot
from vocabmaster.services.lesson_client import LessonClient
from vocabmaster.services.lesson_session import LessonSession, SessionListener
from vocabmaster.services.speech import SpeechPlayer

logger = logging.getLogger(__name__)


class Navigator(Protocol):
    """Router collaborator receiving navigation signals."""

    async def go_back(self) -> None:
        ...

    async def go_to_dashboard(self) -> None:
        ...


class LessonSessionController:
    """Loads a lesson, drives its session and reports completion.

    The controller owns at most one LessonSession. Listeners registered on the
    controller receive snapshots from every session it loads.
    """

    def __init__(
        self,
        client: LessonClient,
        navigator: Navigator,
        speech: Optional[SpeechPlayer] = None,
        strict: bool = False,
    ):
        self.client = client
        self.navigator = navigator
        self.speech = speech
        self.strict = strict
        self.session: Optional[LessonSession] = None
        self.loading = False
        self.not_found = False
        self.closed = False
        self._generation = 0
        self._listeners: List[SessionListener] = []

    @property
    def is_loaded(self) -> bool:
        return self.session is not None

    @property
    def phase(self) -> Optional[LessonPhase]:
        return self.session.phase if self.session else None

    def snapshot(self) -> Optional[SessionSnapshot]:
        return self.session.snapshot() if self.session else None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for the current and any later session."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def load(self, unit_id: Optional[str]) -> Optional[Lesson]:
        """Fetch the lesson of a unit and start a new session on it.

        Without a unit id nothing is requested. A result that arrives after a
        newer load or after close() is dropped.
        """
        if not unit_id:
            logger.debug("No unit id given, lesson not loaded")
            return None

        self._generation += 1
        generation = self._generation
        self.loading = True
        try:
            lesson = await self.client.fetch_lesson(unit_id)
        finally:
            if generation == self._generation:
                self.loading = False

        if self.closed or generation != self._generation:
            logger.info(f"Discarding stale lesson result for unit {unit_id}")
            return None

        if lesson is None or not lesson.words:
            logger.info(f"Lesson for unit {unit_id} not found")
            monitoring.lessons_not_found.inc()
            self._drop_session()
            self.not_found = True
            return None

        self._drop_session()
        self.not_found = False
        self.session = LessonSession(lesson, strict=self.strict)
        self.session.subscribe(self._publish)
        monitoring.lessons_loaded.inc()
        monitoring.active_sessions.inc()
        logger.info(f"Started session for lesson {lesson.id} ({len(lesson.words)} words)")
        self._publish(self.session.snapshot())
        return lesson

    def mark_current_word_learned(self) -> bool:
        if self.session is None:
            return self._not_loaded("mark_current_word_learned")
        return self.session.mark_current_word_learned()

    def record_practice_answer(self, option: Optional[str] = None) -> bool:
        if self.session is None:
            return self._not_loaded("record_practice_answer")
        return self.session.record_practice_answer(option)

    async def complete_lesson(self, unit_id: str) -> bool:
        """Report completion and navigate to the dashboard.

        The learner is navigated away whether or not the backend acknowledged
        the notification. Returns True when it did.
        """
        if self.session is None or self.session.phase is not LessonPhase.REVIEW:
            phase = self.phase.value if self.phase else None
            logger.warning(f"Ignoring complete_lesson for unit {unit_id} in phase {phase}")
            monitoring.invalid_invocations.labels(operation="complete_lesson").inc()
            if self.strict:
                raise InvalidInvocation("complete_lesson", phase)
            return False

        session = self.session
        acknowledged = False
        try:
            await self.client.notify_completion(unit_id)
            acknowledged = True
            monitoring.lessons_completed.inc()
        except TransportFailure as e:
            logger.error(f"Failed to complete lesson: {e}")
            monitoring.completion_failures.inc()
        finally:
            if self.session is session:
                self._drop_session()
            await self.navigator.go_to_dashboard()
        return acknowledged

    async def go_back(self) -> None:
        await self.navigator.go_back()

    def pronounce_current_word(self) -> bool:
        """Ask the speech player to pronounce the current word, without waiting."""
        word = self.session.current_word if self.session else None
        if self.speech is None or word is None:
            return False
        self.speech.speak(word.word)
        return True

    def close(self) -> None:
        """Tear down the controller. Pending loads are ignored when they finish."""
        self.closed = True
        self._generation += 1
        self.loading = False
        self._drop_session()

    def _drop_session(self) -> None:
        if self.session is not None:
            self.session = None
            monitoring.active_sessions.dec()

    def _not_loaded(self, operation: str) -> bool:
        logger.warning(f"Ignoring {operation}, no lesson loaded")
        monitoring.invalid_invocations.labels(operation=operation).inc()
        if self.strict:
            raise InvalidInvocation(operation)
        return False

    def _publish(self, snapshot: SessionSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")
