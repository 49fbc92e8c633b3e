import logging
from typing import Any, Dict, List, Optional

from ..dates import format_date, format_datetime
from ..models import LISTING_URL, UNSPECIFIED_SCHEDULE, Offer
from ..text import clean_string

logger = logging.getLogger(__name__)

# (API field, display name), Monday to Saturday
WEEKDAYS = [
    ("lunes", "Lunes"),
    ("martes", "Martes"),
    ("miercoles", "Miércoles"),
    ("jueves", "Jueves"),
    ("viernes", "Viernes"),
    ("sabado", "Sábado"),
]


def format_schedule(doc: Dict[str, Any]) -> str:
    """Summarize the per-weekday time windows of an offer"""
    lines = []
    for field, day_name in WEEKDAYS:
        value = doc.get(field)
        if isinstance(value, str) and value.strip():
            lines.append(f"{day_name}: {value.strip()}")
    return "\n".join(lines) if lines else UNSPECIFIED_SCHEDULE


def extract_docs(payload: Any) -> Optional[List[Dict[str, Any]]]:
    """Return ``response.docs`` from a Solr JSON payload, or None when the path is missing"""
    if not isinstance(payload, dict):
        return None
    response = payload.get("response")
    if not isinstance(response, dict):
        return None
    docs = response.get("docs")
    if not isinstance(docs, list):
        return None
    return [doc for doc in docs if isinstance(doc, dict)]


class OfferParser:
    """Map raw APD documents to Offer records"""

    def __init__(self, omit_specific_time: bool = False):
        self.omit_specific_time = omit_specific_time

    def parse(self, docs: List[Dict[str, Any]]) -> List[Offer]:
        return [self.parse_doc(doc) for doc in docs]

    def parse_doc(self, doc: Dict[str, Any]) -> Offer:
        offer_id = doc.get("idoferta") or doc.get("id") or ""
        offer = Offer(
            id=str(offer_id),
            title=clean_string(doc.get("cargo")),
            closing_date=format_datetime(doc.get("finoferta"), self.omit_specific_time),
            status=clean_string(doc.get("estado")),
            zone=clean_string(doc.get("descdistrito")),
            level_modality=clean_string(doc.get("descnivelmodalidad")),
            course_division=clean_string(doc.get("cursodivision")),
            school=clean_string(doc.get("escuela")),
            service_address=clean_string(doc.get("domiciliodesempeno")),
            shift=clean_string(doc.get("turno")),
            substitute_category=clean_string(doc.get("supl_revista")),
            position_type=clean_string(doc.get("area")),
            start_date=format_date(clean_string(doc.get("iniciooferta"))),
            substitute_until=format_date(clean_string(doc.get("supl_hasta"))),
            possession_date=format_date(clean_string(doc.get("tomaposesion"))),
            schedule=format_schedule(doc),
            remarks=clean_string(doc.get("observaciones")),
            link=LISTING_URL,
        )
        logger.debug(f"📝 Oferta {offer.id}: cargo={offer.title!r} curso={offer.course_division!r}")
        return offer
