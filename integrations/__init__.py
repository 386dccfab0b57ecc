"""
CarePay External Integrations

Connectors for maps providers used to price worker trips.
"""

from integrations.base import (
    DistanceMatrixProvider,
    DistanceResult,
)

__all__ = [
    "DistanceMatrixProvider",
    "DistanceResult",
]
