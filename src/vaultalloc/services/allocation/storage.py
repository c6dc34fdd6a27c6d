"""Registration record codec.

Packs a registration into a fixed-width 12-byte big-endian record and back,
with explicit range validation per field. Independent of the allocation
algorithm; used to persist or transmit a vault's market registrations.

Layout:
    bytes 0-3    weight            uint32
    bytes 4-7    leverage (raw)    uint32, 6 implied decimals (max 4294.967295x)
    bytes 8-11   market index      uint32, position in a caller-held market list
"""

import struct
from dataclasses import dataclass

from vaultalloc.libraries.numeric.fixed import UFixed6
from vaultalloc.services.allocation.errors import StorageRangeError

RECORD_SIZE = 12
UINT32_MAX = 2**32 - 1

_RECORD = struct.Struct(">III")


@dataclass(frozen=True)
class StoredRegistration:
    """Decoded registration record.

    Attributes:
        market_index: Position of the market in the caller's market list
        weight: Allocation weight
        leverage: Leverage multiplier
    """

    market_index: int
    weight: int
    leverage: UFixed6


def _check_uint32(field_name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise StorageRangeError(f"{field_name} must be an int, got {type(value).__name__}")
    if not 0 <= value <= UINT32_MAX:
        raise StorageRangeError(f"{field_name} out of range [0, {UINT32_MAX}]: {value}")


def encode_registration(market_index: int, weight: int, leverage: UFixed6) -> bytes:
    """Pack a registration into a 12-byte record.

    Raises:
        StorageRangeError: If any field does not fit in 32 bits

    Example:
        >>> encode_registration(0, 1, UFixed6.ONE).hex()
        '00000001000f424000000000'
    """
    _check_uint32("weight", weight)
    _check_uint32("leverage", leverage.raw)
    _check_uint32("market_index", market_index)
    return _RECORD.pack(weight, leverage.raw, market_index)


def decode_registration(data: bytes) -> StoredRegistration:
    """Unpack a 12-byte record.

    Raises:
        StorageRangeError: If data is not exactly RECORD_SIZE bytes
    """
    if len(data) != RECORD_SIZE:
        raise StorageRangeError(f"registration record must be {RECORD_SIZE} bytes, got {len(data)}")

    weight, leverage_raw, market_index = _RECORD.unpack(data)
    return StoredRegistration(
        market_index=market_index,
        weight=weight,
        leverage=UFixed6.from_raw(leverage_raw),
    )


def encode_registrations(registrations: list[StoredRegistration]) -> bytes:
    """Pack a list of registrations back to back."""
    return b"".join(encode_registration(r.market_index, r.weight, r.leverage) for r in registrations)


def decode_registrations(data: bytes) -> list[StoredRegistration]:
    """Unpack back-to-back records.

    Raises:
        StorageRangeError: If data length is not a multiple of RECORD_SIZE
    """
    if len(data) % RECORD_SIZE != 0:
        raise StorageRangeError(f"registration data length {len(data)} is not a multiple of {RECORD_SIZE}")
    return [decode_registration(data[i : i + RECORD_SIZE]) for i in range(0, len(data), RECORD_SIZE)]
