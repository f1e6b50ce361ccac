"""OpenLR v3 binary and Base64 codec.

- serialize / serialize_base64: LocationReference -> bytes / text
- deserialize / deserialize_base64: bytes / text -> LocationReference
"""

from openlr_toolkit.binary.reader import BinaryReader, deserialize, deserialize_base64
from openlr_toolkit.binary.writer import BinaryWriter, serialize, serialize_base64

__all__ = [
    "BinaryReader",
    "BinaryWriter",
    "serialize",
    "serialize_base64",
    "deserialize",
    "deserialize_base64",
]
