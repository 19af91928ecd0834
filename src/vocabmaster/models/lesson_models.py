"""Models for lesson content and session state."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class LessonPhase(Enum):
    """Phases a learner goes through in one lesson."""
    LEARN = "learn"  # Learner reads each word card
    PRACTICE = "practice"  # Learner picks a meaning for each word
    REVIEW = "review"  # Summary before completion

    @property
    def label(self) -> str:
        return PHASE_LABELS[self]


PHASE_LABELS = {
    LessonPhase.LEARN: "Learning",
    LessonPhase.PRACTICE: "Practice",
    LessonPhase.REVIEW: "Review",
}

# Placeholder distractors shown next to the real definition in practice
PRACTICE_DISTRACTORS = ("Wrong option 1", "Wrong option 2", "Wrong option 3")


@dataclass(frozen=True)
class Word:
    """A single vocabulary entry of a lesson."""
    id: str
    word: str
    pronunciation: str = ""
    definition: str = ""
    example_sentence: str = ""
    part_of_speech: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Word":
        """Build a word from its JSON representation."""
        if not isinstance(data, dict):
            raise ValueError(f"Word entry must be an object, got {type(data).__name__}")
        if data.get("id") in (None, "") or not data.get("word"):
            raise ValueError(f"Word entry is missing id or word: {data!r}")
        return cls(
            id=str(data["id"]),
            word=str(data["word"]),
            pronunciation=str(data.get("pronunciation") or ""),
            definition=str(data.get("definition") or ""),
            example_sentence=str(data.get("example_sentence") or ""),
            part_of_speech=str(data.get("part_of_speech") or ""),
        )

    def practice_options(self) -> List[str]:
        """Options offered for this word in the practice phase."""
        return [self.definition, *PRACTICE_DISTRACTORS]


@dataclass(frozen=True)
class Lesson:
    """An ordered list of words fetched for one unit."""
    id: str
    title: str
    words: Tuple[Word, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lesson":
        """Build a lesson from the retrieval endpoint body."""
        if not isinstance(data, dict):
            raise ValueError(f"Lesson body must be an object, got {type(data).__name__}")
        words = data.get("words") or []
        if not isinstance(words, list):
            raise ValueError("Lesson words must be a list")
        return cls(
            id=str(data.get("id", "")),
            title=str(data.get("title", "")),
            words=tuple(Word.from_dict(item) for item in words),
        )

    def __len__(self) -> int:
        return len(self.words)


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a lesson session handed to subscribers."""
    lesson_id: str
    title: str
    phase: LessonPhase
    index: int
    total: int
    current_word: Optional[Word]
    learned_count: int

    @property
    def progress(self) -> float:
        """Fraction of the current pass the learner has reached."""
        if self.total <= 0:
            raise ValueError("Progress is undefined for a lesson without words")
        return (self.index + 1) / self.total
