import logging
from typing import Callable, Optional

from telegram import Update
from telegram.ext import ContextTypes

from ..models import PollStatus
from ..storage import SubscriberStore

logger = logging.getLogger(__name__)

HELP_TEXT = (
    "📖 Ayuda\n\n"
    "Este bot revisa periódicamente las ofertas de Actos Públicos Digitales "
    "y te avisa cuando se publica una nueva.\n\n"
    "/start - Suscribirse a los avisos\n"
    "/status - Estado del último chequeo\n"
    "/help - Esta ayuda"
)


class BotHandlers:
    """Telegram bot command handlers"""

    def __init__(self, subscribers: SubscriberStore, status_provider: Optional[Callable[[], PollStatus]] = None):
        self.subscribers = subscribers
        self.status_provider = status_provider

    async def start(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /start command - register the chat as a subscriber"""
        chat_id = update.effective_chat.id
        if self.subscribers.add(chat_id):
            await update.message.reply_text(
                "👋 ¡Suscripción registrada!\n\n"
                "Vas a recibir un mensaje por cada nueva oferta publicada.\n"
                "Usá /help para ver los comandos disponibles."
            )
        else:
            await update.message.reply_text("⚠️ Ya estabas suscripto a los avisos de nuevas ofertas")

    async def help(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /help command"""
        await update.message.reply_text(HELP_TEXT)

    async def status(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle /status command"""
        if not self.status_provider:
            await update.message.reply_text("ℹ️ Estado no disponible")
            return

        status = self.status_provider()
        last_poll = status.last_poll_at.strftime("%d/%m/%Y %H:%M") if status.last_poll_at else "nunca"
        lines = [
            "📊 Estado del monitor\n",
            f"🕒 Último chequeo: {last_poll}",
            f"🔢 Ofertas registradas: {status.seen_offers}",
            f"📨 Avisos enviados: {status.total_notifications}",
        ]
        if status.last_error:
            lines.append(f"❌ Último error: {status.last_error} ({status.consecutive_failures} seguidos)")
        await update.message.reply_text("\n".join(lines))

    async def unknown_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Handle unknown commands"""
        await update.message.reply_text("❓ Comando desconocido. Usá /help para ver los comandos disponibles.")
