"""Packing of the two attribute bytes that follow every LRP coordinate.

    byte 0: fow (bits 0-2) | frc (bits 3-5) | orientation or side (bits 6-7)
    byte 1: bearing sector (bits 0-4) | lfrcnp or offset flags (bits 5-7)
"""

from openlr_toolkit.core.quantization import Quantizer
from openlr_toolkit.model.attributes import Fow, Frc, LineAttributes


def pack_attributes(line: LineAttributes, first_extra: int = 0, second_extra: int = 0) -> bytes:
    """Pack line attributes plus the two free bit fields into two bytes.

    Args:
        line: FRC, FOW and bearing of the LRP
        first_extra: Orientation or side of road (2 bits)
        second_extra: lfrcnp or offset flags (3 bits)
    """
    sector = Quantizer.bearing_to_sector(line.bearing)
    first = int(line.fow) | int(line.frc) << 3 | (first_extra & 0b11) << 6
    second = sector | (second_extra & 0b111) << 5
    return bytes((first, second))


def unpack_attributes(first: int, second: int) -> tuple[LineAttributes, int, int]:
    """Inverse of pack_attributes.

    Returns:
        (line attributes, orientation/side bits, lfrcnp/flag bits)
    """
    line = LineAttributes(
        frc=Frc((first >> 3) & 0b111),
        fow=Fow(first & 0b111),
        bearing=Quantizer.sector_to_bearing(second & 0b11111),
    )
    return line, (first >> 6) & 0b11, (second >> 5) & 0b111
