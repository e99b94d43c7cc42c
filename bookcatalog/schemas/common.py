"""
Common schemas used across the API
"""

from typing import Optional

from pydantic import BaseModel


class HealthCheckResponse(BaseModel):
    """Health check response"""

    status: str
    timestamp: str
    version: str
    environment: str
    catalog_api: Optional[str] = None
