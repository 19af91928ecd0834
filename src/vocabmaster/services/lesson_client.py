"""HTTP client for the lesson backend."""
import logging
import time
from typing import Optional
from urllib.parse import quote

import httpx

from vocabmaster import monitoring
from vocabmaster.config import settings
from vocabmaster.models.errors import ContentUnavailable, TransportFailure
from vocabmaster.models.lesson_models import Lesson

logger = logging.getLogger(__name__)


class LessonClient:
    """Fetches lessons and reports completions over HTTP."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        lesson_path: Optional[str] = None,
        complete_path: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.lesson_path = lesson_path or settings.api.lesson_path
        self.complete_path = complete_path or settings.api.complete_path
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.api.base_url,
            timeout=timeout or settings.api.timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "LessonClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_lesson(self, unit_id: str) -> Optional[Lesson]:
        """Fetch the lesson of a unit.

        Every failure (transport error, bad status, bad payload, no words)
        collapses into None.
        """
        try:
            return await self._get_lesson(unit_id)
        except ContentUnavailable as e:
            logger.error(f"Failed to fetch lesson: {e}")
            return None

    async def notify_completion(self, unit_id: str) -> None:
        """Tell the backend the unit was completed. Raises TransportFailure."""
        path = self._path(self.complete_path, unit_id)
        started = time.perf_counter()
        try:
            response = await self._client.post(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TransportFailure(unit_id, f"status {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportFailure(unit_id, str(e) or type(e).__name__) from e
        finally:
            monitoring.request_duration.labels(endpoint="complete").observe(time.perf_counter() - started)
        logger.info(f"Completion for unit {unit_id} acknowledged")

    @staticmethod
    def _path(template: str, unit_id: str) -> str:
        """Fill a path template with the percent-encoded unit id."""
        return template.format(unit_id=quote(unit_id, safe=""))

    async def _get_lesson(self, unit_id: str) -> Lesson:
        path = self._path(self.lesson_path, unit_id)
        started = time.perf_counter()
        try:
            response = await self._client.get(path)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise ContentUnavailable(unit_id, f"status {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ContentUnavailable(unit_id, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise ContentUnavailable(unit_id, f"invalid JSON: {e}") from e
        finally:
            monitoring.request_duration.labels(endpoint="lesson").observe(time.perf_counter() - started)

        if not data:
            raise ContentUnavailable(unit_id, "empty response")
        try:
            lesson = Lesson.from_dict(data)
        except ValueError as e:
            raise ContentUnavailable(unit_id, str(e)) from e
        if not lesson.words:
            raise ContentUnavailable(unit_id, "lesson has no words")

        logger.info(f"Fetched lesson {lesson.id} ({len(lesson.words)} words) for unit {unit_id}")
        return lesson
