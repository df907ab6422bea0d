"""
agencydir_shared: configuration, store client and models shared by the
agency directory services.

Usage:
    from agencydir_shared.config import settings
    from agencydir_shared.db import get_supabase_client
    from agencydir_shared.models.agencies import AgencyListing, TradeRef, RegionRef
"""

__version__ = "0.1.0"
