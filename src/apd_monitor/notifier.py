import asyncio
import html
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from .config import ChatId
from .models import UNSPECIFIED_SCHEDULE, Offer

logger = logging.getLogger(__name__)

NEW_HEADER = "🆕 Nueva Oferta:"
PUBLISHED_HEADER = "📢 Oferta Publicada:"
TEST_HEADER = "🧪 Oferta (TEST):"

# Pause between two sends (Telegram allows ~30 msg/s per bot, fewer per chat)
MESSAGE_INTERVAL = 0.5

Sender = Callable[[ChatId, str], Awaitable[bool]]


def _line(label: str, value: str) -> str:
    return f"<b>{label}:</b> {html.escape(value, quote=False)}"


def format_offer_message(offer: Offer, is_new: bool = True, header: Optional[str] = None) -> str:
    """Render an offer as an HTML message

    Blank optional fields are left out instead of being shown empty.
    """
    if header is None:
        header = NEW_HEADER if is_new else PUBLISHED_HEADER

    lines = [
        f"<b>{header}</b>",
        _line("Cargo", offer.title),
    ]
    if offer.closing_date:
        lines.append(_line("Cierre de oferta", offer.closing_date))
    lines += [
        _line("Estado", offer.status),
        _line("Distrito", offer.zone),
        _line("Nivel o Modalidad", offer.level_modality),
    ]

    course = offer.course_division
    if offer.shift:
        course = f"{course} - Turno: {offer.shift}" if course else f"Turno: {offer.shift}"
    lines.append(_line("Curso/División", course))

    if offer.school:
        lines.append(_line("Escuela", offer.school))
    lines.append(_line("Domicilio", offer.service_address))

    if offer.schedule and offer.schedule != UNSPECIFIED_SCHEDULE:
        lines.append("<b>📅 Horarios de desempeño:</b>")
        lines.append(html.escape(offer.schedule, quote=False))

    if offer.position_type:
        lines.append(_line("Área", offer.position_type))
    if offer.substitute_category:
        lines.append(_line("Revista", offer.substitute_category))
    if offer.possession_date:
        lines.append(_line("Toma de posesión", offer.possession_date))
    if offer.start_date:
        lines.append(_line("Inicio", offer.start_date))
    if offer.substitute_until:
        lines.append(_line("Hasta", offer.substitute_until))
    if offer.remarks.strip():
        lines.append(_line("Observaciones", offer.remarks))

    lines.append(_line("Enlace", offer.link))
    return "\n".join(lines)


def unique_recipients(*groups: Iterable[Optional[ChatId]]) -> List[ChatId]:
    """Merge recipient groups, keeping first-seen order and dropping None"""
    recipients: List[ChatId] = []
    for group in groups:
        for chat_id in group:
            if chat_id is not None and chat_id not in recipients:
                recipients.append(chat_id)
    return recipients


class Notifier:
    """Deliver a message to many recipients, one attempt each"""

    def __init__(self, sender: Sender, message_interval: float = MESSAGE_INTERVAL):
        self.sender = sender
        self.message_interval = message_interval

    async def notify(self, message: str, recipients: Iterable[ChatId]) -> int:
        """Send ``message`` to every recipient

        Returns:
            Number of recipients the message was delivered to
        """
        sent = 0
        for i, chat_id in enumerate(recipients):
            if i and self.message_interval:
                await asyncio.sleep(self.message_interval)
            try:
                if await self.sender(chat_id, message):
                    sent += 1
                    logger.debug(f"📨 Mensaje enviado a {chat_id}")
                else:
                    logger.warning(f"⚠️ No se pudo entregar el mensaje a {chat_id}")
            except Exception as e:
                logger.error(f"❌ Error enviando mensaje a {chat_id}: {e}")
        return sent
