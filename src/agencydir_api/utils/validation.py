"""Query parameter parsing for the agencies listing."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from agencydir_shared.config import settings

from agencydir_api.errors import InvalidParamsError

StateCode = Annotated[str, StringConstraints(pattern=r"^[A-Z]{2}$")]

# Parameters that may repeat; everything else is a scalar
MULTI_VALUED = frozenset({"trades", "states"})


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [v.strip() for v in value if isinstance(v, str) and v.strip()]


class AgencyQuery(BaseModel):
    """Validated, immutable description of one listing request."""

    model_config = ConfigDict(frozen=True)

    search: str | None = Field(default=None, max_length=settings.max_search_length)
    trades: tuple[str, ...] = Field(default=(), max_length=settings.max_trade_filters)
    states: tuple[StateCode, ...] = Field(default=(), max_length=settings.max_state_filters)
    limit: int = Field(default=settings.default_limit, ge=1, le=settings.max_limit)
    offset: int = Field(default=0, ge=0)

    @field_validator("search", mode="before")
    @classmethod
    def trim_search(cls, v: Any) -> Any:
        # Length is checked on the trimmed term
        if isinstance(v, str):
            return v.strip() or None
        return v

    @field_validator("trades", mode="before")
    @classmethod
    def normalize_trades(cls, v: Any) -> list[str]:
        return _as_list(v)

    @field_validator("states", mode="before")
    @classmethod
    def normalize_states(cls, v: Any) -> list[str]:
        return [s.upper() for s in _as_list(v)]

    @field_validator("limit", "offset", mode="before")
    @classmethod
    def blank_means_default(cls, v: Any, info: ValidationInfo) -> Any:
        if isinstance(v, str) and not v.strip():
            return settings.default_limit if info.field_name == "limit" else 0
        return v

    @property
    def has_filters(self) -> bool:
        return bool(self.search or self.trades or self.states)


def collect_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Fold a multi-dict into plain values.

    `trades[]` and `trades` land on the same key. A key that repeats, uses
    the `[]` suffix, or is multi-valued by nature becomes a list.
    """
    values: dict[str, list[str]] = {}
    bracketed: set[str] = set()
    for key, value in items:
        if key.endswith("[]"):
            key = key[:-2]
            bracketed.add(key)
        values.setdefault(key, []).append(value)

    params: dict[str, Any] = {}
    for key, vals in values.items():
        if len(vals) == 1 and key not in bracketed and key not in MULTI_VALUED:
            params[key] = vals[0]
        else:
            params[key] = vals
    return params


def parse_agency_query(params: Any) -> AgencyQuery:
    """Validate raw query parameters into an `AgencyQuery`.

    Accepts a Starlette `QueryParams` (or anything with `multi_items()`),
    or a plain mapping of key to value / list of values.

    Raises:
        InvalidParamsError: with one issue per offending field.
    """
    if hasattr(params, "multi_items"):
        items = params.multi_items()
    else:
        items = [
            (key, v)
            for key, value in params.items()
            for v in (value if isinstance(value, (list, tuple)) else [value])
        ]

    try:
        return AgencyQuery.model_validate(collect_params(items))
    except ValidationError as exc:
        raise InvalidParamsError(
            [
                {
                    "path": ".".join(str(p) for p in err["loc"]),
                    "message": err["msg"],
                    "received": err.get("input"),
                }
                for err in exc.errors(include_url=False)
            ]
        ) from exc
