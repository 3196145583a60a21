"""
IP geolocation: resolution (cached, fail-open) and aggregation into
map points and country/city rollups.
"""

from .resolver import GeolocationResolver, is_private_ip
from .aggregation import aggregate

__all__ = ["GeolocationResolver", "is_private_ip", "aggregate"]
