"""
Response models for the report API.
"""

from typing import List

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    db_health: bool
    utility_mode: bool
    config_issues: List[str] = []
