"""
Record schemas for remote API payloads and derived results.

Remote records keep unknown fields (extra="allow") so nothing the API sends is
lost on the way to the client. Field-name variants are resolved once, here, by
an ordered alias table per record; the rest of the package only ever reads the
canonical field.
"""

from typing import Any, ClassVar, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ibex35.errors import RemoteRequestError

RecordT = TypeVar("RecordT", bound="Record")


def _id_to_str(value: Any) -> Any:  # noqa: ANN401
    """Ids arrive as numbers or strings; tool arguments are always strings"""
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _blank_to_none(value: Any) -> Any:  # noqa: ANN401
    """The sheet-backed API sends empty cells as "" for missing numbers"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Record(BaseModel):
    """Base for remote records: keeps extras, resolves field aliases"""

    model_config = ConfigDict(extra="allow")

    # canonical field -> accepted payload keys, highest priority first
    FIELD_ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {}

    @model_validator(mode="before")
    @classmethod
    def resolve_aliases(cls, data: Any) -> Any:  # noqa: ANN401
        if not isinstance(data, dict) or not cls.FIELD_ALIASES:
            return data
        data = dict(data)
        for canonical, aliases in cls.FIELD_ALIASES.items():
            value = None
            for key in aliases:
                candidate = data.pop(key, None)
                if value is None and candidate is not None:
                    value = candidate
            data[canonical] = value
        return data


class Director(Record):
    name: str | None = None
    position: str | None = None
    company_id: str | None = None
    company_name: str | None = None

    @field_validator("company_id", mode="before")
    @classmethod
    def normalize_company_id(cls, value: Any) -> Any:  # noqa: ANN401
        return _id_to_str(value)


class Company(Record):
    FIELD_ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "symbol": ("symbol", "ticker"),
        "pe_ratio": ("price_to_earnings", "pe_ratio"),
    }

    id: str | None = None
    symbol: str | None = None
    name: str | None = None
    sector: str | None = None
    market_cap: float | None = None
    pe_ratio: float | None = None
    directors: list[Director] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def normalize_id(cls, value: Any) -> Any:  # noqa: ANN401
        return _id_to_str(value)

    @field_validator("market_cap", "pe_ratio", mode="before")
    @classmethod
    def blank_numbers(cls, value: Any) -> Any:  # noqa: ANN401
        return _blank_to_none(value)

    @field_validator("directors", mode="before")
    @classmethod
    def null_directors(cls, value: Any) -> Any:  # noqa: ANN401
        return [] if value is None else value


class ShareholderPosition(Record):
    FIELD_ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "shareholder_name": ("shareholder_name", "name"),
        "company_symbol": ("company_symbol", "ticker"),
    }

    shareholder_name: str | None = None
    company_symbol: str | None = None
    percentage: float | None = None

    @field_validator("percentage", mode="before")
    @classmethod
    def blank_percentage(cls, value: Any) -> Any:  # noqa: ANN401
        return _blank_to_none(value)


class HistoricalPrice(Record):
    """One OHLCV row. Lists of these are ordered most recent first."""

    close: float
    date: str | None = None


class NewsItem(Record):
    title: str | None = None
    sentiment: str | None = None


class LobbyingMeeting(Record):
    organization_name: str | None = None
    eu_institution: str | None = None
    quarterly_spending: float | None = None


class WeeklyReport(Record):
    title: str | None = None


# Derived records


class Interlock(BaseModel):
    director_name: str
    companies: str
    company_symbols: list[str]
    board_count: int
    positions: str


class ShareholderOverlap(BaseModel):
    shareholder_name: str
    companies: str
    company_count: int
    avg_percentage: float


class LobbyistActivity(BaseModel):
    organization_name: str
    meeting_count: int
    institutions: str
    spending: list[float]
    avg_spending: float | None


class Performance(BaseModel):
    symbol: str | None
    name: str | None
    sector: str | None
    current_price: float
    period_change: float
    volatility: float | None = None


def extract_payload(payload: dict[str, Any], keys: tuple[str, ...], source: str) -> list[Any]:
    """Return the record list stored under the first present key, [] if none"""
    for key in keys:
        value = payload.get(key)
        if value is None:
            continue
        if not isinstance(value, list):
            msg = f"Unexpected {source} payload: '{key}' is {type(value).__name__}, expected list"
            raise RemoteRequestError(msg)
        return value
    return []


def parse_records(model: type[RecordT], items: list[Any], source: str) -> list[RecordT]:
    """Validate raw items into records; any mismatch rejects the whole payload"""
    try:
        return [model.model_validate(item) for item in items]
    except ValidationError as e:
        msg = f"Unexpected {source} payload: {e.error_count()} invalid field(s)"
        raise RemoteRequestError(msg) from e
