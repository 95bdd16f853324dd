"""
Normalized per-instrument snapshot.

Upstream collaborators hand the pipeline one JSON-like mapping per
instrument. ``StockSnapshot.from_dict`` applies the defaulting table below
exactly once, so the pipeline stages never deal with missing fields.

Field defaults (wire name -> value used when absent):

    symbol                        "UNKNOWN"  (also when blank)
    nissScore                     0.0
    confidence                    None  (treated as "not HIGH", "not LOW")
    currentPrice                  0.0   (degrades the setup to "Invalid price data")
    priceData.change              0.0
    volumeData.relativeVolume     0.0
    technicalData.momentum        0.0
    technicalData.atr             None  (setup uses currentPrice x 2.5%)
    technicalData.support         None
    technicalData.resistance      None
    technicalData.priceAboveSMA20 None  (only an explicit false blocks a rule)
    technicalData.priceBelowSMA20 None  (only an explicit false blocks a rule)
    marketData                    None  (neutral regime)
    marketData.spyChange          0.0
    marketData.vix                20.0
    marketData.advanceDecline     1.0
    latestNews                    None

ATR, support, resistance, VIX and the advance/decline ratio are only
meaningful when positive; zero or negative values are treated as absent.
Non-numeric values are treated as absent. Only a payload that is not a
mapping at all is rejected.
"""
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Union

from .core import Confidence

UNKNOWN_SYMBOL = "UNKNOWN"
DEFAULT_VIX = 20.0
DEFAULT_ADVANCE_DECLINE = 1.0


class SnapshotError(ValueError):
    """Raised when a raw payload cannot be read as a snapshot at all."""


def _number(value: Any, default: Optional[float] = 0.0, positive_only: bool = False) -> Optional[float]:
    """Coerce a JSON value to float, returning ``default`` when unusable."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    if positive_only and number <= 0:
        return default
    return number


def _flag(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _section(payload: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else None


@dataclass(frozen=True)
class TechnicalData:
    atr: Optional[float] = None
    momentum: float = 0.0
    support: Optional[float] = None
    resistance: Optional[float] = None
    price_above_sma20: Optional[bool] = None
    price_below_sma20: Optional[bool] = None


@dataclass(frozen=True)
class MarketData:
    spy_change: float = 0.0
    vix: float = DEFAULT_VIX
    advance_decline: float = DEFAULT_ADVANCE_DECLINE

    @classmethod
    def from_dict(cls, payload: Optional[Mapping[str, Any]]) -> Optional["MarketData"]:
        if payload is None:
            return None
        return cls(
            spy_change=_number(payload.get("spyChange")),
            vix=_number(payload.get("vix"), DEFAULT_VIX, positive_only=True),
            advance_decline=_number(
                payload.get("advanceDecline"), DEFAULT_ADVANCE_DECLINE, positive_only=True
            ),
        )


@dataclass(frozen=True)
class LatestNews:
    """
    Most recent catalyst headline.

    ``timestamp`` is kept as delivered (datetime, ISO-8601 string or epoch
    milliseconds) and parsed only when catalyst age is measured.
    """
    category: Optional[str] = None
    timestamp: Union[datetime, str, float, None] = None

    @property
    def category_key(self) -> str:
        return (self.category or "").strip().lower()


@dataclass(frozen=True)
class StockSnapshot:
    """
    Immutable per-call input for the pipeline.

    Attributes:
        symbol: Instrument ticker
        current_price: Last traded price
        niss_score: Signed composite catalyst strength score
        confidence: Reliability tier of the score, None when unknown
        price_change: Session price change
        relative_volume: Volume relative to its average
    """
    symbol: str
    current_price: float = 0.0
    niss_score: float = 0.0
    confidence: Optional[Confidence] = None
    price_change: float = 0.0
    relative_volume: float = 0.0
    technical: TechnicalData = field(default_factory=TechnicalData)
    market: Optional[MarketData] = None
    latest_news: Optional[LatestNews] = None

    def __post_init__(self):
        if not self.symbol or not isinstance(self.symbol, str):
            raise SnapshotError("Snapshot symbol is required")
        if not isinstance(self.confidence, Confidence) and self.confidence is not None:
            object.__setattr__(self, "confidence", Confidence.parse(self.confidence))

    @property
    def confidence_key(self) -> Optional[str]:
        return self.confidence.value if self.confidence else None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "StockSnapshot":
        """
        Build a snapshot from a camelCase wire payload.

        Raises:
            SnapshotError: If the payload is not a mapping.
        """
        if not isinstance(payload, Mapping):
            raise SnapshotError(f"Snapshot payload must be a mapping, got {type(payload).__name__}")

        symbol = payload.get("symbol")
        if not isinstance(symbol, str) or not symbol.strip():
            symbol = UNKNOWN_SYMBOL

        price_data = _section(payload, "priceData") or {}
        volume_data = _section(payload, "volumeData") or {}
        technical_data = _section(payload, "technicalData") or {}
        news = _section(payload, "latestNews")

        technical = TechnicalData(
            atr=_number(technical_data.get("atr"), None, positive_only=True),
            momentum=_number(technical_data.get("momentum")),
            support=_number(technical_data.get("support"), None, positive_only=True),
            resistance=_number(technical_data.get("resistance"), None, positive_only=True),
            price_above_sma20=_flag(technical_data.get("priceAboveSMA20")),
            price_below_sma20=_flag(technical_data.get("priceBelowSMA20")),
        )

        latest_news = None
        if news is not None:
            category = news.get("category")
            latest_news = LatestNews(
                category=category if isinstance(category, str) else None,
                timestamp=news.get("timestamp"),
            )

        return cls(
            symbol=symbol.strip(),
            current_price=_number(payload.get("currentPrice")),
            niss_score=_number(payload.get("nissScore")),
            confidence=Confidence.parse(payload.get("confidence")),
            price_change=_number(price_data.get("change")),
            relative_volume=_number(volume_data.get("relativeVolume")),
            technical=technical,
            market=MarketData.from_dict(_section(payload, "marketData")),
            latest_news=latest_news,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the camelCase wire shape."""
        news = None
        if self.latest_news is not None:
            timestamp = self.latest_news.timestamp
            news = {
                "category": self.latest_news.category,
                "timestamp": timestamp.isoformat() if isinstance(timestamp, datetime) else timestamp,
            }
        return {
            "symbol": self.symbol,
            "currentPrice": self.current_price,
            "nissScore": self.niss_score,
            "confidence": self.confidence_key,
            "priceData": {"change": self.price_change},
            "volumeData": {"relativeVolume": self.relative_volume},
            "technicalData": {
                "atr": self.technical.atr,
                "momentum": self.technical.momentum,
                "support": self.technical.support,
                "resistance": self.technical.resistance,
                "priceAboveSMA20": self.technical.price_above_sma20,
                "priceBelowSMA20": self.technical.price_below_sma20,
            },
            "marketData": {
                "spyChange": self.market.spy_change,
                "vix": self.market.vix,
                "advanceDecline": self.market.advance_decline,
            } if self.market else None,
            "latestNews": news,
        }
