"""Pronunciation playback using gTTS."""
import asyncio
import hashlib
import logging
import re
from pathlib import Path
from typing import Awaitable, Callable, Optional, Protocol, Set

from gtts import gTTS

from vocabmaster.config import settings

logger = logging.getLogger(__name__)

AudioCallback = Callable[[Path], Awaitable[None]]


class SpeechPlayer(Protocol):
    """Capability that pronounces a piece of text."""

    def speak(self, text: str) -> None:
        ...


def sanitize_filename(text: str) -> str:
    """Turn a word into a safe file name stem."""
    stem = re.sub(r"[^\w\-]+", "_", text.strip().lower()).strip("_")
    return stem or "word"


def cache_filename(text: str, language: str) -> str:
    """Cache file name for a text: readable stem plus a hash of language and text."""
    key = hashlib.sha256(f"{language}:{text}".encode()).hexdigest()[:16]
    return f"{sanitize_filename(text)}_{key}.mp3"


class GTTSSpeechPlayer:
    """Synthesizes pronunciations to mp3 files and hands them to a callback.

    ``speak`` returns immediately; synthesis runs in a worker thread and its
    outcome is never reported back to the caller.
    """

    def __init__(
        self,
        on_audio: Optional[AudioCallback] = None,
        output_dir: Optional[Path] = None,
        language: Optional[str] = None,
    ):
        self.on_audio = on_audio
        self.output_dir = Path(output_dir or settings.paths.pronunciations_dir)
        self.language = language or settings.speech.language
        self._tasks: Set[asyncio.Task] = set()

    def speak(self, text: str) -> None:
        if not text:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running event loop, cannot pronounce {text!r}")
            return
        task = loop.create_task(self._speak(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def synthesize(self, text: str) -> Path:
        """Return the mp3 for a text, generating it on first use."""
        path = self.output_dir / cache_filename(text, self.language)
        if path.exists():
            return path
        self.output_dir.mkdir(parents=True, exist_ok=True)
        tts = gTTS(text=text, lang=self.language)
        partial = path.with_name(path.name + ".part")
        try:
            tts.save(str(partial))
            partial.replace(path)
        finally:
            partial.unlink(missing_ok=True)
        logger.info(f"Pronunciation generated for word: {text}, file: {path.name}")
        return path

    async def _speak(self, text: str) -> None:
        try:
            path = await asyncio.to_thread(self.synthesize, text)
            if self.on_audio is not None:
                await self.on_audio(path)
        except Exception as e:
            logger.error(f"Error pronouncing word: {text}, error: {e}")
