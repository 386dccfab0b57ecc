"""
Base Integration Classes

Abstract base classes and common data models for external providers.
"""

from abc import ABC, abstractmethod
from enum import Enum

from pydantic import BaseModel, Field

from engines.schemas.draft_pay import TravelMode


class IntegrationCategory(str, Enum):
    """Categories of integrations."""

    MAPS = "maps"


class DistanceResult(BaseModel):
    """Normalized trip between two addresses from any maps provider."""

    origins: str
    destinations: str
    mode: TravelMode
    duration: float = Field(..., description="Seconds")
    distance: float = Field(..., description="Meters")

    # Raw data from provider
    raw_data: dict = Field(default_factory=dict)


class DistanceMatrixProvider(ABC):
    """Abstract base class for distance matrix providers."""

    provider_name: str
    category = IntegrationCategory.MAPS
    base_url: str

    def __init__(self, api_key: str, config: dict | None = None):
        self.api_key = api_key
        self.config = config or {}

    @abstractmethod
    async def get_distance_matrix(
        self,
        origins: str,
        destinations: str,
        mode: TravelMode,
    ) -> DistanceResult | None:
        """
        Fetch the trip between two addresses.

        Returns:
            DistanceResult, or None when the provider has no route or is unavailable
        """
        pass

    async def close(self):
        """Release provider resources."""
        pass
