"""
models/agencies.py: read-only projections of agencies and their trades/regions.

Rows come back from the store with the join tables nested one level deep:

    {"id": ..., "name": ...,
     "trades": [{"trade": {"id", "name", "slug"}}, ...],
     "regions": [{"region": {"id", "name", "state_code"}}, ...]}

`AgencyListing.from_db_row` flattens them into the public shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TradeRef(BaseModel):
    """Matches a trades table row."""

    id: str
    name: str
    slug: str

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "TradeRef":
        return cls(id=str(row["id"]), name=row["name"], slug=row["slug"])


class RegionRef(BaseModel):
    """A regions table row; `state_code` is published as `code`."""

    id: str
    name: str
    code: str

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "RegionRef":
        return cls(id=str(row["id"]), name=row["name"], code=row["state_code"])


def _flatten(join_rows: list[dict[str, Any]] | None, key: str) -> list[dict[str, Any]]:
    """Unwrap `[{key: {...}}, ...]`, skipping join rows with no target."""
    if not join_rows:
        return []
    return [row[key] for row in join_rows if row and row.get(key)]


class AgencyListing(BaseModel):
    """Matches the agencies table row plus its flattened trades and regions.

    Columns not declared here are carried through unchanged.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    slug: str
    description: str | None = None
    logo_url: str | None = None
    website: str | None = None
    phone: str | None = None
    email: str | None = None
    headquarters: str | None = None
    founded_year: int | None = None
    employee_count: str | None = None
    # Flag columns default to false in the schema but are nullable; NULL is
    # passed through as None.
    is_active: bool | None = True
    is_claimed: bool | None = False
    is_union: bool | None = False
    offers_per_diem: bool | None = False
    profile_completion_percentage: int | None = None
    trades: list[TradeRef] = Field(default_factory=list)
    regions: list[RegionRef] = Field(default_factory=list)

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> "AgencyListing":
        data = dict(row)
        trades = _flatten(data.pop("trades", None), "trade")
        regions = _flatten(data.pop("regions", None), "region")
        data["id"] = str(data["id"])
        return cls(
            **data,
            trades=[TradeRef.from_db_row(t) for t in trades],
            regions=[RegionRef.from_db_row(r) for r in regions],
        )

    def to_public_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class PageMetadata(BaseModel):
    """Pagination block of a listing response."""

    model_config = ConfigDict(populate_by_name=True)

    total: int
    limit: int
    offset: int
    has_more: bool = Field(alias="hasMore")

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "PageMetadata":
        return cls(total=total, limit=limit, offset=offset, has_more=total > offset + limit)

    def to_public_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
