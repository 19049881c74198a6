"""Electro-optical systems.

Band lookup for ASTER / MODIS / OCM-2, grating diffraction, thermal-infrared
surface temperature retrieval (split window, two-look), sensor calibration
constants K1/K2, and thermal properties of surface materials.
"""

from __future__ import annotations

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from remsens.constants import SIGMA
from remsens.contracts import (
    FormulaSpec,
    Param,
    ensures,
    positive,
    requires,
    result_close_to,
    result_in_range,
    result_positive,
    same_length,
)
from remsens.formulas.bands import ASTER, MODIS, OCM_2, BandRange, covers, find_band
from remsens.quantity import (
    Angle,
    AngularFrequency,
    Density,
    Distance,
    Diffusivity,
    Emissivity,
    HeatCapacity,
    OpticalDepth,
    SpectralRadiance,
    Temperature,
    ThermalConductivity,
    ThermalInertia,
    Velocity,
    Wavelength,
)
from remsens.registry import register


log = logging.getLogger(__name__)

MIN_TRAINING_SAMPLES = 3


# ------------------------------ band lookup ------------------------------


def _band_lookup(instrument: str, table: tuple[BandRange, ...]) -> FormulaSpec:
    lo = min(b.lower for b in table)
    hi = max(b.upper for b in table)
    return register(
        FormulaSpec(
            name=f"el_opt.{instrument}",
            params=(Param("wavelength", Wavelength),),
            body=lambda wavelength: find_band(table, wavelength).index,
            preconditions=(
                requires(
                    f"wavelength_in_{instrument}_band",
                    "wavelength",
                    lambda w: covers(table, w),
                    f"wavelength must fall inside a {instrument.upper()} band ({lo:g} .. {hi:g} m, with gaps)",
                ),
            ),
            postconditions=(result_in_range(1, len(table), description=f"band index must lie in [1, {len(table)}]"),),
        )
    )


ASTER_BAND = _band_lookup("aster", ASTER)
MODIS_BAND = _band_lookup("modis", MODIS)
OCM_2_BAND = _band_lookup("ocm_2", OCM_2)


def aster(wavelength: Wavelength | float) -> int:
    """ASTER band index (1-9) of ``wavelength``."""
    return ASTER_BAND(wavelength)


def modis(wavelength: Wavelength | float) -> int:
    """MODIS band index (1-19) of ``wavelength``.

    Bands 17 and 19 overlap; the lower index wins.
    """
    return MODIS_BAND(wavelength)


def ocm_2(wavelength: Wavelength | float) -> int:
    return OCM_2_BAND(wavelength)


# ------------------------------ diffraction ------------------------------


def _is_order(n: object) -> bool:
    return isinstance(n, numbers.Integral) and not isinstance(n, bool) and n >= 1


DIFFRACTION_ANGLE = register(
    FormulaSpec(
        name="el_opt.diffraction_angle",
        params=(Param("n"), Param("wavelength", Wavelength), Param("d", Distance)),
        body=lambda n, wavelength, d: np.arcsin(n * wavelength / d),
        preconditions=(
            requires("order_valid", "n", _is_order, "diffraction order n must be an integer >= 1"),
            requires("d_in_range", "d", lambda d: 0.0 < d < 1.0, "grating spacing d must lie in (0, 1) m"),
            requires(
                "order_exists",
                ("n", "wavelength", "d"),
                lambda n, w, d: n * w / d <= 1.0,
                "n * wavelength / d must not exceed 1 (no such diffraction order)",
            ),
        ),
        postconditions=(
            result_close_to(("n", "wavelength", "d"), lambda n, w, d: math.asin(n * w / d), "result must equal asin(n lambda / d)"),
        ),
        result_kind=Angle,
    )
)


def diffraction_angle(n: int, wavelength: Wavelength | float, d: Distance | float) -> Angle:
    """Angle of the ``n``-th diffraction maximum, ``asin(n lambda / d)``."""
    return DIFFRACTION_ANGLE(n, wavelength, d)


# ------------------------------ split window ------------------------------


@dataclass(frozen=True)
class SplitWindowCoefficients:
    """``T_s = a0 + a1 * T_b1 + a2 * T_b2``.

    The defaults (untrained) simply average the two brightness temperatures.
    """

    a0: float = 0.0
    a1: float = 0.5
    a2: float = 0.5

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.a0, self.a1, self.a2)


DEFAULT_SPLIT_WINDOW = SplitWindowCoefficients()


SURFACE_TEMP_SPLIT_WINDOW = register(
    FormulaSpec(
        name="el_opt.surface_temp_split_window",
        params=(
            Param("temp_b1", Temperature),
            Param("temp_b2", Temperature),
            Param("coefficients", default=DEFAULT_SPLIT_WINDOW),
        ),
        body=lambda temp_b1, temp_b2, coefficients: coefficients.a0
        + coefficients.a1 * temp_b1
        + coefficients.a2 * temp_b2,
        preconditions=(
            requires(
                "coefficients_type",
                "coefficients",
                lambda c: isinstance(c, SplitWindowCoefficients),
                "coefficients must be SplitWindowCoefficients",
            ),
        ),
        result_kind=Temperature,
    )
)


def surface_temp_split_window(
    temp_b1: Temperature | float,
    temp_b2: Temperature | float,
    coefficients: SplitWindowCoefficients = DEFAULT_SPLIT_WINDOW,
) -> Temperature:
    """Split-window surface temperature from two thermal-band brightness temperatures."""
    return SURFACE_TEMP_SPLIT_WINDOW(temp_b1, temp_b2, coefficients)


def _fit_split_window(temps_b0: Sequence[float], temps_b1: Sequence[float], temps_b2: Sequence[float]) -> SplitWindowCoefficients:
    y = np.asarray(temps_b0, dtype=np.float64)
    b1 = np.asarray(temps_b1, dtype=np.float64)
    b2 = np.asarray(temps_b2, dtype=np.float64)
    design = np.column_stack([np.ones_like(b1), b1, b2])
    coef, _, rank, _ = np.linalg.lstsq(design, y, rcond=None)
    resid = y - design @ coef
    rms = float(np.sqrt(np.mean(resid**2)))
    log.info("split-window fit: n=%d rank=%d rms=%.4g K max|res|=%.4g K", y.size, rank, rms, float(np.max(np.abs(resid))))
    return SplitWindowCoefficients(float(coef[0]), float(coef[1]), float(coef[2]))


def _all_finite(*seqs: Sequence[float]) -> bool:
    return all(bool(np.all(np.isfinite(np.asarray(s, dtype=np.float64)))) for s in seqs)


TRAIN_SPLIT_WINDOW = register(
    FormulaSpec(
        name="el_opt.train_split_window",
        params=(Param("temps_b0"), Param("temps_b1"), Param("temps_b2")),
        body=_fit_split_window,
        preconditions=(
            same_length("temps_b0", "temps_b1", "temps_b2"),
            requires(
                "enough_samples",
                "temps_b0",
                lambda t: len(t) >= MIN_TRAINING_SAMPLES,
                f"at least {MIN_TRAINING_SAMPLES} training samples are required",
            ),
            requires(
                "samples_finite",
                ("temps_b0", "temps_b1", "temps_b2"),
                _all_finite,
                "training temperatures must be finite numbers",
            ),
        ),
        postconditions=(
            ensures(
                "coefficients_finite",
                "result",
                lambda c: all(math.isfinite(v) for v in c.as_tuple()),
                "fitted coefficients must be finite",
            ),
        ),
    )
)


def train_split_window(
    temps_b0: Sequence[float], temps_b1: Sequence[float], temps_b2: Sequence[float]
) -> SplitWindowCoefficients:
    """Least-squares fit of split-window coefficients.

    ``temps_b0`` are reference surface temperatures (e.g. in-situ), ``temps_b1``
    and ``temps_b2`` the matching brightness temperatures of the two bands.
    The fit residuals are logged at INFO.
    """
    return TRAIN_SPLIT_WINDOW(temps_b0, temps_b1, temps_b2)


# ------------------------------ two-look surface temperature ------------------------------


def _two_look(temp_b1: float, temp_b2: float, temp_a: float, theta: float) -> tuple[float, float]:
    # T_b1 - T_a = (T_b0 - T_a) exp(-tau), T_b2 - T_a = (T_b0 - T_a) exp(-tau sec(theta))
    sec_minus_1 = 1.0 / np.cos(np.float64(theta)) - 1.0
    tau = np.log((temp_b1 - temp_a) / np.float64(temp_b2 - temp_a)) / sec_minus_1
    return temp_a + (temp_b1 - temp_a) * np.exp(tau), tau


_TWO_LOOK_PRE = (
    requires(
        "theta_oblique",
        "theta",
        lambda t: 0.0 < t < math.pi / 2.0,
        "oblique look angle must lie in (0, pi/2)",
    ),
    requires(
        "same_side_of_atmosphere",
        ("temp_b1", "temp_b2", "temp_a"),
        lambda b1, b2, a: b1 != a and b2 != a and (b1 > a) == (b2 > a),
        "both brightness temperatures must differ from temp_a on the same side",
    ),
    requires(
        "oblique_attenuated",
        ("temp_b1", "temp_b2", "temp_a"),
        lambda b1, b2, a: abs(b2 - a) <= abs(b1 - a),
        "the oblique look must be at least as close to temp_a as the nadir look",
    ),
)

_TWO_LOOK_PARAMS = (
    Param("temp_b1", Temperature),
    Param("temp_b2", Temperature),
    Param("temp_a", Temperature),
    Param("theta", Angle),
)


SURFACE_TEMP_TAU = register(
    FormulaSpec(
        name="el_opt.surface_temp_tau",
        params=_TWO_LOOK_PARAMS,
        body=_two_look,
        preconditions=_TWO_LOOK_PRE,
        result_kind=(Temperature, OpticalDepth),
    )
)

SURFACE_TEMP = register(
    FormulaSpec(
        name="el_opt.surface_temp",
        params=_TWO_LOOK_PARAMS,
        body=lambda temp_b1, temp_b2, temp_a, theta: _two_look(temp_b1, temp_b2, temp_a, theta)[0],
        preconditions=_TWO_LOOK_PRE,
        result_kind=Temperature,
    )
)


def surface_temp_tau(
    temp_b1: Temperature | float,
    temp_b2: Temperature | float,
    temp_a: Temperature | float,
    theta: Angle | float,
) -> tuple[Temperature, OpticalDepth]:
    """Two-look retrieval of surface temperature and vertical optical depth.

    Parameters
    ----------
    temp_b1
        Brightness temperature seen at nadir.
    temp_b2
        Brightness temperature seen along a slant path at zenith angle ``theta``.
    temp_a
        Temperature of the (isothermal) atmosphere.
    theta
        Zenith angle of the oblique look [rad], strictly between 0 and pi/2.

    Returns
    -------
    (T_b0, tau)
        ``tau = ln((T_b1 - T_a) / (T_b2 - T_a)) / (sec(theta) - 1)`` and
        ``T_b0 = T_a + (T_b1 - T_a) exp(tau)``.
    """
    return SURFACE_TEMP_TAU(temp_b1, temp_b2, temp_a, theta)


def surface_temp(
    temp_b1: Temperature | float,
    temp_b2: Temperature | float,
    temp_a: Temperature | float,
    theta: Angle | float,
) -> Temperature:
    """Same as :func:`surface_temp_tau` without the optical depth."""
    return SURFACE_TEMP(temp_b1, temp_b2, temp_a, theta)


# ------------------------------ calibration constants ------------------------------


AVG_SPECTRAL_RADIANCE = register(
    FormulaSpec(
        name="el_opt.avg_spectral_radiance",
        params=(Param("k1", SpectralRadiance), Param("k2", Temperature), Param("temp", Temperature)),
        body=lambda k1, k2, temp: k1 / np.expm1(np.float64(k2) / temp),
        preconditions=(positive("k1"),),
        postconditions=(result_positive(),),
        result_kind=SpectralRadiance,
    )
)

EARTH_SURFACE_TEMP = register(
    FormulaSpec(
        name="el_opt.earth_surface_temp",
        params=(Param("k1", SpectralRadiance), Param("k2", Temperature), Param("radiance", SpectralRadiance)),
        body=lambda k1, k2, radiance: k2 / np.log1p(np.float64(k1) / radiance),
        preconditions=(positive("k1"), positive("radiance")),
        postconditions=(result_positive(),),
        result_kind=Temperature,
    )
)


def avg_spectral_radiance(
    k1: SpectralRadiance | float, k2: Temperature | float, temp: Temperature | float
) -> SpectralRadiance:
    """Band-averaged spectral radiance of a surface at ``temp``.

    ``L = K1 / (exp(K2 / T) - 1)`` with the sensor's calibration constants
    K1 (radiance units) and K2 (kelvin).
    """
    return AVG_SPECTRAL_RADIANCE(k1, k2, temp)


def earth_surface_temp(
    k1: SpectralRadiance | float, k2: Temperature | float, radiance: SpectralRadiance | float
) -> Temperature:
    """Inverse of :func:`avg_spectral_radiance`: ``T = K2 / ln(K1 / L + 1)``."""
    return EARTH_SURFACE_TEMP(k1, k2, radiance)


# ------------------------------ thermal properties ------------------------------


_MATERIAL = (
    Param("heat_capacity", HeatCapacity),
    Param("density", Density),
    Param("thermal_conductivity", ThermalConductivity),
)

THERMAL_INERTIA = register(
    FormulaSpec(
        name="el_opt.thermal_inertia",
        params=_MATERIAL,
        body=lambda heat_capacity, density, thermal_conductivity: np.sqrt(
            np.float64(heat_capacity) * density * thermal_conductivity
        ),
        postconditions=(result_positive(),),
        result_kind=ThermalInertia,
    )
)

THERMAL_WAVE_SPEED = register(
    FormulaSpec(
        name="el_opt.thermal_wave_speed",
        params=(*_MATERIAL, Param("angular_frequency", AngularFrequency)),
        body=lambda heat_capacity, density, thermal_conductivity, angular_frequency: np.sqrt(
            2.0 * thermal_conductivity * np.float64(angular_frequency) / (heat_capacity * density)
        ),
        postconditions=(result_positive(),),
        result_kind=Velocity,
    )
)

THERMAL_DIFFUSIVITY = register(
    FormulaSpec(
        name="el_opt.thermal_diffusivity",
        params=_MATERIAL,
        body=lambda heat_capacity, density, thermal_conductivity: np.float64(thermal_conductivity)
        / (heat_capacity * density),
        postconditions=(result_positive(),),
        result_kind=Diffusivity,
    )
)


def thermal_inertia(
    heat_capacity: HeatCapacity | float, density: Density | float, thermal_conductivity: ThermalConductivity | float
) -> ThermalInertia:
    """P = sqrt(k rho c)"""
    return THERMAL_INERTIA(heat_capacity, density, thermal_conductivity)


def thermal_wave_speed(
    heat_capacity: HeatCapacity | float,
    density: Density | float,
    thermal_conductivity: ThermalConductivity | float,
    angular_frequency: AngularFrequency | float,
) -> Velocity:
    """Phase speed of a periodic thermal wave, ``sqrt(2 k omega / (rho c))``."""
    return THERMAL_WAVE_SPEED(heat_capacity, density, thermal_conductivity, angular_frequency)


def thermal_diffusivity(
    heat_capacity: HeatCapacity | float, density: Density | float, thermal_conductivity: ThermalConductivity | float
) -> Diffusivity:
    return THERMAL_DIFFUSIVITY(heat_capacity, density, thermal_conductivity)


# ------------------------------ surface heat flux ------------------------------


def _flux_weight(mean_temp: float, emissivity: float) -> float:
    return 4.0 * emissivity * SIGMA * np.float64(mean_temp) ** 3


UPWARD_HEAT_FLUX_WEIGHT = register(
    FormulaSpec(
        name="el_opt.upward_heat_flux_weight",
        params=(Param("mean_temp", Temperature), Param("emissivity", Emissivity)),
        body=_flux_weight,
        postconditions=(result_positive(),),
    )
)

# Signed: negative when the surface is colder than its mean.
UPWARD_HEAT_FLUX = register(
    FormulaSpec(
        name="el_opt.upward_heat_flux",
        params=(Param("temp", Temperature), Param("mean_temp", Temperature), Param("emissivity", Emissivity)),
        body=lambda temp, mean_temp, emissivity: _flux_weight(mean_temp, emissivity) * (temp - mean_temp),
    )
)


def upward_heat_flux_weight(mean_temp: Temperature | float, emissivity: Emissivity | float) -> float:
    """Linearised radiative loss coefficient ``alpha = 4 eps sigma T_mean^3`` [W m-2 K-1]."""
    return UPWARD_HEAT_FLUX_WEIGHT(mean_temp, emissivity)


def upward_heat_flux(
    temp: Temperature | float, mean_temp: Temperature | float, emissivity: Emissivity | float
) -> float:
    """``alpha * (T - T_mean)`` in W m-2."""
    return UPWARD_HEAT_FLUX(temp, mean_temp, emissivity)
