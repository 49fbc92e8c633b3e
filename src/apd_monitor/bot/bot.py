import logging
from typing import Callable, Optional

from telegram.constants import ParseMode
from telegram.error import Forbidden, TelegramError
from telegram.ext import Application, CommandHandler, MessageHandler, filters
from telegram.request import HTTPXRequest

from ..config import ChatId
from ..models import PollStatus
from ..storage import SubscriberStore
from .handlers import BotHandlers

logger = logging.getLogger(__name__)

# Telegram API timeouts (seconds)
CONNECT_TIMEOUT = 30.0
READ_TIMEOUT = 30.0
WRITE_TIMEOUT = 30.0
POOL_TIMEOUT = 10.0


class TelegramBot:
    """Telegram bot wrapper"""

    def __init__(
        self,
        token: str,
        subscribers: SubscriberStore,
        status_provider: Optional[Callable[[], PollStatus]] = None
    ):
        self.token = token
        self.handlers = BotHandlers(subscribers, status_provider)
        self.application: Optional[Application] = None

    def setup(self) -> Application:
        """Setup bot application with handlers"""
        request = HTTPXRequest(
            connect_timeout=CONNECT_TIMEOUT,
            read_timeout=READ_TIMEOUT,
            write_timeout=WRITE_TIMEOUT,
            pool_timeout=POOL_TIMEOUT,
        )

        self.application = (
            Application.builder()
            .token(self.token)
            .request(request)
            .build()
        )

        self.application.add_handler(CommandHandler("start", self.handlers.start))
        self.application.add_handler(CommandHandler("help", self.handlers.help))
        self.application.add_handler(CommandHandler("status", self.handlers.status))

        # Handle unknown commands
        self.application.add_handler(MessageHandler(filters.COMMAND, self.handlers.unknown_command))

        return self.application

    async def send_message(self, chat_id: ChatId, message: str) -> bool:
        """Send an HTML message, one attempt

        Returns:
            True: sent
            False: failed (bot blocked or any other Telegram error)
        """
        if self.application is None:
            raise RuntimeError("TelegramBot.setup() must be called before sending")

        try:
            await self.application.bot.send_message(
                chat_id=chat_id,
                text=message,
                parse_mode=ParseMode.HTML,
                disable_web_page_preview=True
            )
            return True
        except Forbidden:
            logger.warning(f"⚠️ El chat {chat_id} bloqueó al bot")
            return False
        except TelegramError as e:
            logger.error(f"❌ Error enviando mensaje a Telegram ({chat_id}): {e}")
            return False

    async def send_admin_alert(self, chat_id: ChatId, message: str) -> bool:
        """Send admin alert message"""
        return await self.send_message(chat_id, f"🚨 <b>Alerta del monitor</b>\n\n{message}")
