from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

# Link to the public listing; the API does not expose a per-offer URL
LISTING_URL = "https://servicios.abc.gob.ar/actos.publicos.digitales/"

# Marker used when no weekday carries a time window
UNSPECIFIED_SCHEDULE = "No especificado"


@dataclass
class Offer:
    """APD job offer model"""
    id: str
    title: str = ""
    closing_date: str = ""
    status: str = ""
    zone: str = ""
    level_modality: str = ""
    course_division: str = ""
    school: str = ""
    service_address: str = ""
    shift: str = ""
    substitute_category: str = ""
    position_type: str = ""
    start_date: str = ""
    substitute_until: str = ""
    possession_date: str = ""
    schedule: str = UNSPECIFIED_SCHEDULE
    remarks: str = ""
    link: str = LISTING_URL


class MonitorState(BaseModel):
    """Persisted record of the offers already processed"""
    model_config = ConfigDict(populate_by_name=True)

    seen_offer_ids: List[str] = Field(default_factory=list, alias="seenOfferIds")
    is_first_run: bool = Field(default=True, alias="isFirstRun")

    @model_validator(mode="before")
    @classmethod
    def convert_legacy_state(cls, data: Any) -> Any:
        """Accept the `seen_offers` / `firstRun` keys of older state files"""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "seenOfferIds" not in data and "seen_offers" in data:
            data["seenOfferIds"] = data.pop("seen_offers")
        if "isFirstRun" not in data and "firstRun" in data:
            data["isFirstRun"] = data.pop("firstRun")
        if isinstance(data.get("seenOfferIds"), list):
            data["seenOfferIds"] = [str(i) for i in data["seenOfferIds"]]
        return data

    def to_json_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


@dataclass
class PollResult:
    """Outcome of a single poll cycle"""
    fetched: int
    new: int
    notified: int
    first_run: bool = False
    failed: bool = False


@dataclass
class PollStatus:
    """Running counters describing the health of the poll loop"""
    last_poll_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_error: Optional[str] = None
    consecutive_failures: int = 0
    total_polls: int = 0
    skipped_polls: int = 0
    total_notifications: int = 0
    seen_offers: int = 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "last_poll_at": self.last_poll_at.isoformat() if self.last_poll_at else None,
            "last_success_at": self.last_success_at.isoformat() if self.last_success_at else None,
            "last_error": self.last_error,
            "consecutive_failures": self.consecutive_failures,
            "total_polls": self.total_polls,
            "skipped_polls": self.skipped_polls,
            "total_notifications": self.total_notifications,
            "seen_offers": self.seen_offers,
        }
