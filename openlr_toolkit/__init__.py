"""OpenLR Toolkit - Map-independent location referencing.

Encodes paths and points on a road network into compact OpenLR v3 location
references and decodes them back onto another road network by map matching.

Modules:
    core: Foundation helpers (geodesy, quantization)
    model: Location references, LRPs, graph locations and configs
    binary: OpenLR v3 binary and Base64 codec
    graph: DirectedGraph protocol, path helpers, Dijkstra, RoadNetwork
    decoder: Candidate rating and route resolution
    encoder: Path expansion and LRP placement

Example:
    from openlr_toolkit import DecoderConfig, decode_base64
    location = decode_base64(DecoderConfig(), graph, "CwRbWyNG9RpsCQCb/jsbtAT/6/+jK1lE")
"""

from openlr_toolkit.binary import deserialize, deserialize_base64, serialize, serialize_base64
from openlr_toolkit.decoder import decode, decode_base64, decode_binary
from openlr_toolkit.encoder import encode, encode_base64, encode_binary
from openlr_toolkit.model import DecoderConfig, EncoderConfig

__all__ = [
    "serialize",
    "deserialize",
    "serialize_base64",
    "deserialize_base64",
    "encode",
    "encode_binary",
    "encode_base64",
    "decode",
    "decode_binary",
    "decode_base64",
    "DecoderConfig",
    "EncoderConfig",
]
