"""Lesson session state machine.

A session walks one learner through the words of a lesson twice: once in the
learn phase and once in the practice phase. After the practice pass it rests
in the review phase until the host completes the lesson.
"""
import logging
from typing import Callable, Dict, List, Optional, Set

from vocabmaster import monitoring
from vocabmaster.models.errors import InvalidInvocation
from vocabmaster.models.lesson_models import Lesson, LessonPhase, SessionSnapshot, Word

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]

# Phase entered once the words of a phase are exhausted
NEXT_PHASE = {
    LessonPhase.LEARN: LessonPhase.PRACTICE,
    LessonPhase.PRACTICE: LessonPhase.REVIEW,
}


class LessonSession:
    """Phase, word cursor and learned words of one lesson attempt."""

    def __init__(self, lesson: Lesson, strict: bool = False):
        self.lesson = lesson
        self.strict = strict
        self.phase = LessonPhase.LEARN
        self.current_index = 0
        self.learned_word_ids: Set[str] = set()
        self.practice_answers: Dict[str, Optional[str]] = {}
        self._listeners: List[SessionListener] = []

    @property
    def total(self) -> int:
        return len(self.lesson.words)

    @property
    def current_word(self) -> Optional[Word]:
        """Word under the cursor, None for a lesson without words."""
        if 0 <= self.current_index < self.total:
            return self.lesson.words[self.current_index]
        return None

    @property
    def progress(self) -> float:
        return self.snapshot().progress

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            lesson_id=self.lesson.id,
            title=self.lesson.title,
            phase=self.phase,
            index=self.current_index,
            total=self.total,
            current_word=self.current_word,
            learned_count=len(self.learned_word_ids),
        )

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def mark_word_learned(self, word_id: str) -> bool:
        """Add a word to the learned set. Returns False if it was already there."""
        if word_id in self.learned_word_ids:
            return False
        self.learned_word_ids.add(word_id)
        monitoring.words_learned.inc()
        return True

    def mark_current_word_learned(self) -> bool:
        """Mark the current word as learned and move on to the next one."""
        word = self._guard("mark_current_word_learned", LessonPhase.LEARN)
        if word is None:
            return False
        self.mark_word_learned(word.id)
        self._advance()
        return True

    def record_practice_answer(self, option: Optional[str] = None) -> bool:
        """Record the learner's pick for the current word and move on.

        Practice is not graded: any option advances the cursor. The pick is
        only remembered for the review summary.
        """
        word = self._guard("record_practice_answer", LessonPhase.PRACTICE)
        if word is None:
            return False
        self.practice_answers[word.id] = option
        monitoring.practice_answers.inc()
        self._advance()
        return True

    def _guard(self, operation: str, phase: LessonPhase) -> Optional[Word]:
        word = self.current_word
        if self.phase is phase and word is not None:
            return word
        logger.warning(f"Ignoring {operation} in phase {self.phase.value} for lesson {self.lesson.id}")
        monitoring.invalid_invocations.labels(operation=operation).inc()
        if self.strict:
            raise InvalidInvocation(operation, self.phase.value)
        return None

    def _advance(self) -> None:
        if self.current_index < self.total - 1:
            self.current_index += 1
        else:
            self.current_index = 0
            self.phase = NEXT_PHASE[self.phase]
            logger.debug(f"Lesson {self.lesson.id} entered phase {self.phase.value}")
        self._notify()

    def _notify(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")
