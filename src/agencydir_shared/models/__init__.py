"""
agencydir_shared.models: Pydantic models matching the directory tables.

All row models provide:
  .from_db_row(row: dict) -> Model
"""

from agencydir_shared.models.agencies import AgencyListing, PageMetadata, RegionRef, TradeRef

__all__ = [
    "AgencyListing",
    "PageMetadata",
    "RegionRef",
    "TradeRef",
]
