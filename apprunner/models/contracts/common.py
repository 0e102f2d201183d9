"""
Common contract models shared by apps, resources, runs and dashboards.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class KeyValuePair(BaseModel):
    """Ordered key/value entry used for URL parameters, headers and bodies"""
    key: str
    value: str


class PagedResult(BaseModel, Generic[T]):
    """One page of a list query plus the unpaginated match count"""
    items: list[T] = Field(default_factory=list)
    total_count: int = Field(..., ge=0, description="Matches before skip/take")
    skip: int = Field(..., ge=0)
    take: int = Field(..., ge=1)
