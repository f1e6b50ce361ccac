"""Foundation helpers shared by every layer.

- GeoCalculator: Haversine distance, bearings, destination points
- Quantizer: Physical values <-> quantized wire integers
"""

from openlr_toolkit.core.geo_calculator import GeoCalculator
from openlr_toolkit.core.quantization import Quantizer, round_half_away

__all__ = [
    "GeoCalculator",
    "Quantizer",
    "round_half_away",
]
