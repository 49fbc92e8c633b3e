import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from .config import ChatId, FirstRunPolicy
from .models import MonitorState, Offer, PollResult, PollStatus
from .notifier import Notifier, format_offer_message
from .source import BaseSource
from .storage import StateStore

logger = logging.getLogger(__name__)

RecipientsProvider = Callable[[], List[ChatId]]
AlertSender = Callable[[str], Awaitable[None]]


class OfferMonitor:
    """Poll loop: fetch offers, announce the unseen ones, persist the seen set"""

    def __init__(
        self,
        source: BaseSource,
        state_store: StateStore,
        notifier: Notifier,
        recipients: RecipientsProvider,
        first_run_policy: FirstRunPolicy = FirstRunPolicy.SILENT,
        alert_sender: Optional[AlertSender] = None,
        alert_threshold: int = 5
    ):
        self.source = source
        self.state_store = state_store
        self.notifier = notifier
        self.recipients = recipients
        self.first_run_policy = first_run_policy
        self.alert_sender = alert_sender
        self.alert_threshold = alert_threshold
        self.status = PollStatus()
        self._lock = asyncio.Lock()
        self._alert_sent = False

    @property
    def is_polling(self) -> bool:
        return self._lock.locked()

    async def poll(self) -> Optional[PollResult]:
        """Run one poll cycle

        Returns None when another cycle is still running; the tick is skipped,
        not queued.
        """
        if self._lock.locked():
            self.status.skipped_polls += 1
            logger.warning("⏭️ Chequeo anterior todavía en curso, se omite este ciclo")
            return None

        async with self._lock:
            self.status.total_polls += 1
            self.status.last_poll_at = datetime.now()
            try:
                return await self._poll_once()
            except Exception as e:
                # Keep the scheduler alive; the cycle counts as failed
                logger.exception(f"❌ Error inesperado durante el chequeo: {e}")
                await self._record_failure(str(e))
                return PollResult(fetched=0, new=0, notified=0, failed=True)

    async def _poll_once(self) -> PollResult:
        logger.info(f"🔎 Iniciando chequeo de ofertas ({self.source.get_source_name()})...")
        loop = asyncio.get_running_loop()
        offers = await loop.run_in_executor(None, self.source.fetch)

        if self.source.last_error:
            await self._record_failure(self.source.last_error)
            return PollResult(fetched=0, new=0, notified=0, failed=True)

        state = self.state_store.load()
        if state.is_first_run:
            result = await self._first_run(state, offers)
        else:
            result = await self._steady_state(state, offers)

        await self._record_success(result, state)
        return result

    def _valid_offers(self, offers: List[Offer]) -> List[Offer]:
        valid = []
        for offer in offers:
            if not offer.id:
                logger.warning(f"⚠️ Oferta sin identificador ignorada: {offer.title!r}")
                continue
            valid.append(offer)
        return valid

    async def _first_run(self, state: MonitorState, offers: List[Offer]) -> PollResult:
        offers = self._valid_offers(offers)
        notified = 0
        if self.first_run_policy == FirstRunPolicy.SEND_ALL:
            logger.info("🚀 Primera ejecución: enviando TODAS las ofertas publicadas...")
            recipients = self.recipients()
            for offer in offers:
                notified += await self.notifier.notify(format_offer_message(offer, is_new=False), recipients)
        else:
            logger.info("🚀 Primera ejecución: se registran las ofertas actuales sin notificar")

        state.seen_offer_ids = list(dict.fromkeys(offer.id for offer in offers))
        state.is_first_run = False
        self.state_store.save(state)
        logger.info(f"✅ Primera ejecución completada: {len(offers)} ofertas registradas, {notified} enviadas")
        return PollResult(fetched=len(offers), new=len(offers), notified=notified, first_run=True)

    async def _steady_state(self, state: MonitorState, offers: List[Offer]) -> PollResult:
        seen = set(state.seen_offer_ids)
        new_offers = []
        for offer in self._valid_offers(offers):
            if offer.id in seen:
                continue
            seen.add(offer.id)
            new_offers.append(offer)

        recipients = self.recipients() if new_offers else []
        notified = 0
        for offer in new_offers:
            notified += await self.notifier.notify(format_offer_message(offer, is_new=True), recipients)
            state.seen_offer_ids.append(offer.id)

        self.state_store.save(state)
        logger.info(
            f"✅ Chequeo finalizado: {len(offers)} ofertas, "
            f"{len(new_offers)} nuevas, {notified} mensajes entregados"
        )
        return PollResult(fetched=len(offers), new=len(new_offers), notified=notified)

    async def _record_success(self, result: PollResult, state: MonitorState) -> None:
        recovered = self.status.consecutive_failures > 0
        self.status.last_success_at = datetime.now()
        self.status.last_error = None
        self.status.total_notifications += result.notified
        self.status.seen_offers = len(state.seen_offer_ids)

        if recovered:
            logger.info(f"✅ Consulta recuperada (antes {self.status.consecutive_failures} fallos seguidos)")
            if self._alert_sent:
                await self._alert("✅ La consulta de ofertas volvió a funcionar")
        self.status.consecutive_failures = 0
        self._alert_sent = False

    async def _record_failure(self, error: str) -> None:
        self.status.last_error = error
        self.status.consecutive_failures += 1
        logger.error(f"❌ Chequeo fallido (fallo {self.status.consecutive_failures} seguido): {error}")

        if self.status.consecutive_failures >= self.alert_threshold and not self._alert_sent:
            self._alert_sent = True
            await self._alert(
                f"⚠️ La consulta de ofertas falló {self.status.consecutive_failures} veces seguidas\n\n"
                f"Error: {error}"
            )

    async def _alert(self, message: str) -> None:
        if not self.alert_sender:
            return
        try:
            await self.alert_sender(message)
        except Exception as e:
            logger.error(f"❌ No se pudo enviar la alerta al administrador: {e}")
