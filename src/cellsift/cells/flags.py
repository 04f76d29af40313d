"""Flag bit layout shared by gating, selection, ROI and radial stages.

Selection treats the structural mask (cflag) and the phenotype mask
(pflag) as one 64-bit space, so the two masks use disjoint bit ranges:
phenotype bits are assigned from bit 0 upward, structural bits live at
PHENO_BITS and above.
"""

import numpy as np

__all__ = [
    'PHENO_BITS',
    'ROI_FLAG',
    'FLAG_MASK',
    'flags_match',
    'flags_match_array',
]

FLAG_MASK = 0xFFFFFFFFFFFFFFFF

# Phenotype bits 0..47, structural bits 48..63
PHENO_BITS = 48

ROI_FLAG = 1 << PHENO_BITS


def flags_match(flags: int, and_mask: int, or_mask: int) -> bool:
    """Return True when all AND bits are set and, if any OR bits are given,
    at least one of them is set."""
    if flags & and_mask != and_mask:
        return False
    if or_mask and not flags & or_mask:
        return False
    return True


def flags_match_array(flags: np.ndarray, and_mask: int, or_mask: int) -> np.ndarray:
    """Vectorized flags_match over a uint64 array."""
    flags = np.asarray(flags, dtype=np.uint64)
    and_m = np.uint64(and_mask)
    keep = (flags & and_m) == and_m
    if or_mask:
        keep &= (flags & np.uint64(or_mask)) != 0
    return keep
