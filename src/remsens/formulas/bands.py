"""Spectral band tables of electro-optical instruments.

Bounds are in metres and inclusive on both sides. Tables keep the
instrument's own band numbering, which is not sorted by wavelength (MODIS),
and adjacent bands may share a bound (ASTER 5/6, 8/9) or overlap (MODIS
17/19). A lookup returns the first band in table order that contains the
wavelength.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(frozen=True)
class BandRange:
    index: int
    lower: float
    upper: float

    @property
    def bandwidth(self) -> float:
        return self.upper - self.lower

    def contains(self, wavelength: float) -> bool:
        return self.lower <= wavelength <= self.upper


BandTable = Sequence[BandRange]


def _table(*bounds: tuple[float, float]) -> tuple[BandRange, ...]:
    return tuple(BandRange(i, lo, hi) for i, (lo, hi) in enumerate(bounds, start=1))


# ASTER VNIR + SWIR (band 3 nadir/backward not distinguished).
ASTER = _table(
    (0.52e-6, 0.60e-6),
    (0.63e-6, 0.69e-6),
    (0.76e-6, 0.86e-6),
    (1.600e-6, 1.700e-6),
    (2.145e-6, 2.185e-6),
    (2.185e-6, 2.225e-6),
    (2.235e-6, 2.285e-6),
    (2.295e-6, 2.365e-6),
    (2.365e-6, 2.430e-6),
)

# MODIS reflective bands 1-19.
MODIS = _table(
    (6.20e-7, 6.70e-7),
    (8.41e-7, 8.76e-7),
    (4.59e-7, 4.79e-7),
    (5.45e-7, 5.65e-7),
    (1.230e-6, 1.250e-6),
    (1.628e-6, 1.652e-6),
    (2.105e-6, 2.155e-6),
    (4.05e-7, 4.20e-7),
    (4.38e-7, 4.48e-7),
    (4.84e-7, 4.93e-7),
    (5.26e-7, 5.36e-7),
    (5.46e-7, 5.56e-7),
    (6.62e-7, 6.72e-7),
    (6.73e-7, 6.83e-7),
    (7.43e-7, 7.53e-7),
    (8.62e-7, 8.77e-7),
    (8.90e-7, 9.20e-7),
    (9.31e-7, 9.41e-7),
    (9.15e-7, 9.65e-7),
)

# Oceansat-2 Ocean Colour Monitor.
OCM_2 = _table(
    (4.04e-7, 4.24e-7),
    (4.31e-7, 4.51e-7),
    (4.76e-7, 4.96e-7),
    (5.00e-7, 5.20e-7),
    (5.46e-7, 5.66e-7),
    (6.10e-7, 6.30e-7),
    (7.25e-7, 7.55e-7),
    (8.45e-7, 8.85e-7),
)

TABLES: dict[str, tuple[BandRange, ...]] = {"aster": ASTER, "modis": MODIS, "ocm_2": OCM_2}


def find_band(table: BandTable, wavelength: float) -> BandRange | None:
    for band in table:
        if band.contains(wavelength):
            return band
    return None


def covers(table: BandTable, wavelength: float) -> bool:
    return find_band(table, wavelength) is not None
