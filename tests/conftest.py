"""
Pytest configuration and shared fixtures.
"""

from typing import List, Optional

import pytest

from apd_monitor.models import Offer
from apd_monitor.source import BaseSource
from apd_monitor.storage import StateStore, SubscriberStore


class FakeSource(BaseSource):
    """In-memory offer source returning a scripted sequence of batches."""

    def __init__(self, batches: Optional[List[List[Offer]]] = None):
        self.batches = list(batches or [])
        self.calls = 0
        self.fail_with: Optional[str] = None
        self.last_error = None

    def get_source_name(self) -> str:
        return "fake"

    def fetch(self) -> List[Offer]:
        self.calls += 1
        if self.fail_with:
            self.last_error = self.fail_with
            return []
        self.last_error = None
        if not self.batches:
            return []
        if len(self.batches) > 1:
            return self.batches.pop(0)
        return self.batches[0]


class RecordingSender:
    """Async sender that records (chat_id, message) pairs."""

    def __init__(self, failing_chats=None, raising_chats=None):
        self.sent = []
        self.failing_chats = set(failing_chats or [])
        self.raising_chats = set(raising_chats or [])

    async def __call__(self, chat_id: int, message: str) -> bool:
        if chat_id in self.raising_chats:
            raise RuntimeError("transport down")
        if chat_id in self.failing_chats:
            return False
        self.sent.append((chat_id, message))
        return True


def make_offer(offer_id: str, **kwargs) -> Offer:
    """Create an Offer with sensible defaults for testing."""
    defaults = dict(
        title=f"PROFESOR/A {offer_id}",
        closing_date="05/03/2024 10:00",
        status="Publicada",
        zone="GENERAL PUEYRREDON",
        level_modality="SECUNDARIA",
        course_division="5 A",
        school="EES N° 12",
        service_address="Av. Independencia 1234",
        shift="M",
    )
    defaults.update(kwargs)
    return Offer(id=offer_id, **defaults)


@pytest.fixture
def sample_doc():
    """A raw APD document as returned by the listing API."""
    return {
        "idoferta": 123456,
        "id": "abc",
        "cargo": "PROFESOR/A DE EDUCACIÃ³N FÃ­SICA",
        "finoferta": "2024-03-05T13:00:00Z",
        "estado": "Publicada",
        "descdistrito": "general pueyrredon",
        "descnivelmodalidad": "SECUNDARIA",
        "cursodivision": "5A",
        "escuela": "EES NÂ° 12",
        "domiciliodesempeno": "  Av. Independencia 1234  ",
        "turno": "M",
        "supl_revista": "S",
        "area": "EDUCACION FISICA",
        "iniciooferta": "2024-03-06T03:00:00Z",
        "supl_hasta": "2024-12-20T03:00:00Z",
        "tomaposesion": "2024-03-06T03:00:00Z",
        "lunes": "08:00 a 10:00",
        "martes": " ",
        "miercoles": "10:00 a 12:00",
        "observaciones": "",
    }


@pytest.fixture
def sample_offer():
    return make_offer("1")


@pytest.fixture
def state_store(tmp_path):
    return StateStore(tmp_path / "estado_ofertas.json")


@pytest.fixture
def subscriber_store(tmp_path):
    return SubscriberStore(tmp_path / "suscriptores.json")


@pytest.fixture
def sender():
    return RecordingSender()
