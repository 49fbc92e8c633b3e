import logging
from typing import List, Tuple

import requests

from ..config import FilterConfig
from ..models import Offer
from .base import BaseSource
from .parser import OfferParser, extract_docs

logger = logging.getLogger(__name__)


class ApdSource(BaseSource):
    """APD offer listing (Solr select endpoint)"""

    DEFAULT_USER_AGENT = "Mozilla/5.0"

    def __init__(
        self,
        api_url: str,
        filters: FilterConfig,
        timeout: int = 30,
        omit_specific_time: bool = False,
        session: requests.Session = None
    ):
        self.api_url = api_url
        self.filters = filters
        self.timeout = timeout
        self.parser = OfferParser(omit_specific_time=omit_specific_time)
        self.session = session or requests.Session()
        self.last_error = None

    def get_source_name(self) -> str:
        return "APD"

    def build_params(self) -> List[Tuple[str, str]]:
        """Query parameters; `fq` is repeated so a list of pairs is used"""
        return [
            ("rows", str(self.filters.rows)),
            ("facet", "true"),
            ("facet.limit", "-1"),
            ("facet.mincount", "1"),
            ("json.nl", "map"),
            ("facet.field", "cargo"),
            ("fq", f'descdistrito:"{self.filters.district}"'),
            ("fq", f"estado:{self.filters.status}"),
            ("q", "*:*"),
            ("wt", "json"),
        ]

    def fetch(self) -> List[Offer]:
        """Fetch offers; any failure is logged and yields an empty list"""
        try:
            resp = self.session.get(
                self.api_url,
                params=self.build_params(),
                headers={"User-Agent": self.DEFAULT_USER_AGENT},
                timeout=self.timeout
            )
            resp.raise_for_status()
            payload = resp.json()
        except ValueError as e:
            # Includes requests' JSONDecodeError
            return self._fail(f"Respuesta JSON inválida: {e}")
        except requests.RequestException as e:
            return self._fail(f"Error de red: {e}")

        docs = extract_docs(payload)
        if docs is None:
            return self._fail("Respuesta sin response.docs")
        logger.info(f"📥 Ofertas totales recibidas: {len(docs)}")
        self.last_error = None
        return self.parser.parse(docs)

    def _fail(self, message: str) -> List[Offer]:
        logger.error(f"❌ Error al obtener ofertas: {message}")
        self.last_error = message
        return []
