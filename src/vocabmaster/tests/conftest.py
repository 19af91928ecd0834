"""Test configuration."""
import os
import tempfile
from pathlib import Path
from typing import Callable

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"
os.environ.setdefault("DATA_DIR", tempfile.mkdtemp(prefix="vocabmaster-test-"))

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
from vocabmaster.config import ensure_directories
from vocabmaster.models.lesson_models import Lesson, Word

fake = Faker()


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    ensure_directories()
    yield


def make_word(**overrides) -> Word:
    """Create a word with fake content."""
    data = {
        "id": fake.uuid4(),
        "word": fake.word(),
        "pronunciation": f"/{fake.word()}/",
        "definition": fake.sentence(),
        "example_sentence": fake.sentence(),
        "part_of_speech": fake.random_element(["noun", "verb", "adjective", "adverb"]),
    }
    data.update(overrides)
    return Word(**data)


def make_lesson(size: int = 3, **overrides) -> Lesson:
    """Create a lesson with the given number of fake words."""
    data = {
        "id": fake.uuid4(),
        "title": fake.catch_phrase(),
        "words": tuple(make_word() for _ in range(size)),
    }
    data.update(overrides)
    return Lesson(**data)


def lesson_payload(lesson: Lesson) -> dict:
    """JSON body served by the lesson endpoint for a lesson."""
    return {
        "id": lesson.id,
        "title": lesson.title,
        "words": [
            {
                "id": word.id,
                "word": word.word,
                "pronunciation": word.pronunciation,
                "definition": word.definition,
                "example_sentence": word.example_sentence,
                "part_of_speech": word.part_of_speech,
            }
            for word in lesson.words
        ],
    }


@pytest.fixture
def lesson_factory() -> Callable[..., Lesson]:
    return make_lesson


@pytest.fixture
def lesson() -> Lesson:
    return make_lesson(3)


@pytest.fixture
def payload_factory() -> Callable[[Lesson], dict]:
    return lesson_payload
