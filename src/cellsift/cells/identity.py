"""Packed 64-bit cell identity.

A cell identity stores two 32-bit integers in one 64-bit value: the high
half is the sample (group) id and the low half is the per-sample cell
(item) id. Every read or write of either half goes through CellId.
"""

from typing import NamedTuple

__all__ = ['CellId', 'MAX_ID32', 'MAX_ID64']

MAX_ID32 = 0xFFFFFFFF
MAX_ID64 = 0xFFFFFFFFFFFFFFFF


def _check_u32(value: int, what: str) -> int:
    value = int(value)
    if value < 0 or value > MAX_ID32:
        raise ValueError(f"{what} {value} outside unsigned 32-bit range")
    return value


class CellId(NamedTuple):
    """Unpacked cell identity.

    Examples
    --------
    >>> CellId(3, 17).pack()
    12884901905
    >>> CellId.unpack(12884901905)
    CellId(sample_id=3, cell_id=17)
    """

    sample_id: int
    cell_id: int

    def pack(self) -> int:
        """Encode as one 64-bit integer (sample id in the high half)."""
        sample = _check_u32(self.sample_id, "sample_id")
        cell = _check_u32(self.cell_id, "cell_id")
        return (sample << 32) | cell

    @classmethod
    def unpack(cls, packed: int) -> "CellId":
        """Decode a 64-bit packed identity."""
        packed = int(packed)
        if packed < 0 or packed > MAX_ID64:
            raise ValueError(f"packed id {packed} outside unsigned 64-bit range")
        return cls(packed >> 32, packed & MAX_ID32)

    def with_sample(self, sample_id: int) -> "CellId":
        return CellId(sample_id, self.cell_id)

    def with_cell(self, cell_id: int) -> "CellId":
        return CellId(self.sample_id, cell_id)
