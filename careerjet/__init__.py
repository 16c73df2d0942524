"""Careerjet job-search API client.

Usage:
    from careerjet import CareerjetClient

    client = CareerjetClient(config).keywords("python").sort_by("date")
    data = await client.query()
"""

from careerjet.client import CareerjetClient
from careerjet.core.errors import (
    CareerjetError,
    ConfigurationError,
    TransportError,
    ValidationError,
)

__all__ = [
    "CareerjetClient",
    "CareerjetError",
    "ConfigurationError",
    "TransportError",
    "ValidationError",
]
