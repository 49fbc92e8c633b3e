import asyncio
import logging
import logging.handlers
from pathlib import Path
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .bot.bot import TelegramBot
from .config import AppConfig, ChatId, ConfigManager
from .models import PollResult, PollStatus
from .monitor import OfferMonitor
from .notifier import TEST_HEADER, Notifier, format_offer_message, unique_recipients
from .source import ApdSource, BaseSource
from .storage import StateStore, SubscriberStore


def setup_logging(log_dir: Optional[Path] = None, level: int = logging.INFO) -> None:
    """Configure logging

    - stdout (collected by the platform / journald)
    - optional file, rotated at midnight, 30 days kept
    """
    log_format = "%(asctime)s - %(levelname)s - %(message)s"
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Avoid duplicated handlers when called twice
    root_logger.handlers.clear()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(stream_handler)

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = log_dir / "app.log"
        file_handler = logging.handlers.TimedRotatingFileHandler(
            filename=log_file,
            when="midnight",
            interval=1,
            backupCount=30,
            encoding="utf-8"
        )
        file_handler.setFormatter(logging.Formatter(log_format))
        file_handler.suffix = "%Y-%m-%d"
        root_logger.addHandler(file_handler)

    # Suppress noisy library logs
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)

POLL_JOB_ID = "offer_poll"


def create_source(config: AppConfig) -> BaseSource:
    return ApdSource(
        api_url=config.api_url,
        filters=config.filters,
        timeout=config.request_timeout,
        omit_specific_time=config.omit_specific_time
    )


class Application:
    """Main application that wires the bot, the poll loop and the scheduler"""

    def __init__(self, config: AppConfig, config_manager: ConfigManager):
        self.config = config
        self.config_manager = config_manager
        self.state_store = StateStore(config_manager.state_path)
        self.subscribers = SubscriberStore(config_manager.subscribers_path)
        self.source = create_source(config)
        self.bot = TelegramBot(config.bot_token, self.subscribers, status_provider=self.get_status)
        self.notifier = Notifier(self.bot.send_message)
        self.monitor = OfferMonitor(
            source=self.source,
            state_store=self.state_store,
            notifier=self.notifier,
            recipients=self.get_recipients,
            first_run_policy=config.first_run_policy,
            alert_sender=self._notify_admin,
            alert_threshold=config.alert_threshold
        )
        self.scheduler = AsyncIOScheduler()

    def get_status(self) -> PollStatus:
        return self.monitor.status

    def get_recipients(self) -> List[ChatId]:
        """Default chat first, then registered subscribers"""
        return unique_recipients([self.config.chat_id], self.subscribers.load())

    async def _notify_admin(self, message: str) -> None:
        if not self.config.admin_chat_id:
            logger.warning("⚠️ ADMIN_CHAT_ID no configurado, no se envía la alerta")
            return
        await self.bot.send_admin_alert(self.config.admin_chat_id, message)

    async def run_once(self) -> PollResult:
        """Run a single poll cycle outside the scheduler"""
        application = self.bot.setup()
        async with application:
            return await self.monitor.poll()

    async def force_send(self) -> int:
        """Send every current offer as a TEST message to the default chat"""
        if self.config.chat_id is None:
            raise ValueError("CHAT_ID must be configured to force a test send")

        logger.info("🧪 Envío manual para testing...")
        application = self.bot.setup()
        async with application:
            loop = asyncio.get_running_loop()
            offers = await loop.run_in_executor(None, self.source.fetch)
            if not offers:
                logger.info("ℹ️ No se encontraron ofertas para enviar.")
                return 0
            sent = 0
            for offer in offers:
                message = format_offer_message(offer, header=TEST_HEADER)
                sent += await self.notifier.notify(message, [self.config.chat_id])
        logger.info(f"✅ Testing completado. {len(offers)} ofertas, {sent} mensajes entregados")
        return sent

    def run(self) -> None:
        """Start the application (blocking)"""
        application = self.bot.setup()

        # coalesce: missed runs collapse into one; max_instances: no overlapping ticks
        self.scheduler.add_job(
            self.monitor.poll,
            "interval",
            minutes=self.config.fetch_interval_minutes,
            id=POLL_JOB_ID,
            misfire_grace_time=None,
            coalesce=True,
            max_instances=1
        )

        async def post_init(app):
            self.scheduler.start()
            logger.info(f"⏰ Chequeo automático programado (cada {self.config.fetch_interval_minutes} min)")
            await self.monitor.poll()

        async def post_shutdown(app):
            if self.scheduler.running:
                self.scheduler.shutdown(wait=False)
            logger.info("🛑 Monitor detenido")

        application.post_init = post_init
        application.post_shutdown = post_shutdown

        logger.info("🤖 Telegram Bot iniciando...")
        application.run_polling()
