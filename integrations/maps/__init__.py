"""
Maps integrations.
"""

from integrations.maps.google import GoogleDistanceMatrixClient

__all__ = ["GoogleDistanceMatrixClient"]
