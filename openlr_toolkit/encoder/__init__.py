"""Path reducing encoder.

- encode / encode_binary / encode_base64: Location on a graph -> reference
- expand_line: Extend path ends onto valid nodes
- LrpPlacer, build_lrps: Minimal LRP placement and LRP attributes
"""

from openlr_toolkit.encoder.encoder import encode, encode_base64, encode_binary
from openlr_toolkit.encoder.expansion import expand_line, select_expansion_candidate
from openlr_toolkit.encoder.resolver import LrpPlacer, build_lrps

__all__ = [
    "encode",
    "encode_binary",
    "encode_base64",
    "expand_line",
    "select_expansion_candidate",
    "LrpPlacer",
    "build_lrps",
]
