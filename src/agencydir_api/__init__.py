"""agencydir_api: FastAPI service for the staffing agency directory."""

__version__ = "0.1.0"
