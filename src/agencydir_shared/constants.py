"""
constants.py: table names, error codes and route names shared across the API.
"""

from __future__ import annotations

from typing import Final, Literal

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------
AGENCIES_TABLE: Final = "agencies"
TRADES_TABLE: Final = "trades"
REGIONS_TABLE: Final = "regions"
AGENCY_TRADES_TABLE: Final = "agency_trades"
AGENCY_REGIONS_TABLE: Final = "agency_regions"

# Listing projection: every agency column plus the nested join rows
AGENCY_LISTING_SELECT: Final = (
    "*, "
    "trades:agency_trades(trade:trades(id, name, slug)), "
    "regions:agency_regions(region:regions(id, name, state_code))"
)

# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------
ErrorCode = Literal["INVALID_PARAMS", "DATABASE_ERROR", "INTERNAL_ERROR"]

INVALID_PARAMS: Final = "INVALID_PARAMS"
DATABASE_ERROR: Final = "DATABASE_ERROR"
INTERNAL_ERROR: Final = "INTERNAL_ERROR"

# ---------------------------------------------------------------------------
# Routes tracked by the error-rate counters
# ---------------------------------------------------------------------------
AGENCIES_ROUTE: Final = "/v1/agencies"

# Filter dimensions
Dimension = Literal["trade", "state"]
