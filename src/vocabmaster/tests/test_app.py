"""Tests for the main application."""
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from telegram.ext import ConversationHandler

from vocabmaster import app as app_module
from vocabmaster.app import VocabMasterBot, build_conversation_handler
from vocabmaster.bot import LESSON, MAIN_MENU


@pytest.fixture
def mock_app() -> AsyncMock:
    """Create mock application with async methods."""
    mock_app = AsyncMock()
    mock_app.initialize = AsyncMock()
    mock_app.start = AsyncMock()
    mock_app.updater = AsyncMock()
    mock_app.updater.start_polling = AsyncMock()
    mock_app.stop = AsyncMock()
    mock_app.shutdown = AsyncMock()
    mock_app.add_handler = MagicMock()
    mock_app.bot_data = {}
    return mock_app


@pytest.fixture
def bot(mock_app: AsyncMock):
    """Create a bot instance with mocked dependencies."""
    mock_builder = MagicMock()
    mock_builder.token.return_value.build.return_value = mock_app

    with patch("vocabmaster.app.Application.builder", return_value=mock_builder), \
            patch.object(app_module.settings.bot, "token", "test-token"), \
            patch.object(app_module.settings.monitoring, "enabled", False):
        yield VocabMasterBot()


def test_conversation_handler_states() -> None:
    handler = build_conversation_handler()

    assert isinstance(handler, ConversationHandler)
    assert set(handler.states) == {MAIN_MENU, LESSON}


@pytest.mark.asyncio
async def test_start(bot: VocabMasterBot, mock_app: AsyncMock) -> None:
    """Test starting the bot."""
    await bot.start()

    assert bot.running
    assert bot.application is mock_app
    assert mock_app.bot_data["lesson_client"] is bot.lesson_client
    mock_app.add_handler.assert_called_once()
    mock_app.updater.start_polling.assert_awaited_once()

    await bot.stop()


@pytest.mark.asyncio
async def test_stop(bot: VocabMasterBot, mock_app: AsyncMock) -> None:
    """Test stopping the bot."""
    await bot.start()
    client = bot.lesson_client
    with patch.object(client, "aclose", AsyncMock()) as aclose:
        await bot.stop()

    assert not bot.running
    assert bot.application is None
    assert bot.lesson_client is None
    mock_app.shutdown.assert_awaited_once()
    aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_start_without_token_fails(mock_app: AsyncMock) -> None:
    bot = VocabMasterBot()

    with patch.object(app_module.settings.bot, "token", ""):
        with pytest.raises(ValueError):
            await bot.start()

    assert not bot.running
    assert bot.lesson_client is None
