"""Passive microwave radiometry.

Antenna patterns are plain callables ``P(theta, phi)`` normalised to a peak of
1; brightness temperature maps are callables ``T_B(theta, phi)`` in kelvin.
Pattern integrals use :mod:`remsens.formulas.hemisphere`; ``step=None`` takes
the configured ``integration_step``.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Callable

import numpy as np

from remsens.constants import K_B, PI
from remsens.contracts import (
    FormulaSpec,
    Param,
    ensures,
    positive,
    requires,
    result_in_range,
    result_positive,
)
from remsens.formulas.hemisphere import (
    AngularFunction,
    callable_contract,
    integrate,
    resolve_step,
    step_contract,
    weighted_mean,
)
from remsens.quantity import (
    Area,
    Distance,
    Efficiency,
    Frequency,
    Gain,
    NormalizedDifference,
    OpticalDepth,
    Power,
    SolidAngle,
    SpectralFluxDensity,
    SpectralRadiance,
    Temperature,
    Time,
    Wavelength,
)
from remsens.registry import register


class AntennaType(str, Enum):
    MONOPOLE = "monopole"
    SHORT_DIPOLE = "short_dipole"
    HALF_WAVE_DIPOLE = "half_wave_dipole"
    YAGI_UDA_SIX = "yagi_uda_six"
    RECTANGULAR = "rectangular"
    PARABOLOID = "paraboloid"


# Aperture antennas: beamwidth = factor * lambda / size [deg].
_APERTURE_FACTOR = {AntennaType.RECTANGULAR: 51.0, AntennaType.PARABOLOID: 72.0}

# Fixed beamwidths [deg]; a monopole is treated as isotropic (0).
_FIXED_HPBW = {
    AntennaType.MONOPOLE: 0.0,
    AntennaType.SHORT_DIPOLE: 90.0,
    AntennaType.HALF_WAVE_DIPOLE: 90.0,
    AntennaType.YAGI_UDA_SIX: 42.0,
}


JNOISE_POWER = register(
    FormulaSpec(
        name="muwave.jnoise_power",
        params=(Param("antenna_temp", Temperature), Param("bandwidth", Frequency)),
        body=lambda antenna_temp, bandwidth: K_B * antenna_temp * bandwidth,
        postconditions=(result_positive(),),
        result_kind=Power,
    )
)


def jnoise_power(antenna_temp: Temperature | float, bandwidth: Frequency | float) -> Power:
    """Johnson-Nyquist noise power ``k T B``."""
    return JNOISE_POWER(antenna_temp, bandwidth)


def _hpbw(wavelength: float, size: float | None, antenna_type: AntennaType) -> float:
    if antenna_type in _FIXED_HPBW:
        return _FIXED_HPBW[antenna_type]
    return _APERTURE_FACTOR[antenna_type] * wavelength / size


HPBW = register(
    FormulaSpec(
        name="muwave.hpbw",
        params=(Param("wavelength", Wavelength), Param("size", Distance, default=None), Param("antenna_type")),
        body=_hpbw,
        preconditions=(
            requires(
                "antenna_type_known",
                "antenna_type",
                lambda t: isinstance(t, AntennaType),
                "antenna_type must be an AntennaType",
            ),
            requires(
                "aperture_size",
                ("size", "antenna_type"),
                lambda s, t: t not in _APERTURE_FACTOR or (s is not None and s > 0.0),
                "rectangular and paraboloid antennas need a side length / diameter > 0",
            ),
        ),
        postconditions=(result_in_range(0.0, 360.0, description="beamwidth must lie in [0, 360] degrees"),),
    )
)


def hpbw(wavelength: Wavelength | float, size: Distance | float | None, antenna_type: AntennaType) -> float:
    """Half-power beamwidth in degrees.

    ``size`` is the side of a rectangular aperture or the diameter of a
    paraboloid; it is ignored for wire antennas and may be ``None`` there.
    """
    return HPBW(wavelength, size, antenna_type)


DIRECTIVITY = register(
    FormulaSpec(
        name="muwave.directivity",
        params=(Param("beam_solid_angle", SolidAngle),),
        body=lambda beam_solid_angle: 4.0 * PI / beam_solid_angle,
        postconditions=(ensures("directivity_at_least_one", "result", lambda r: r >= 1.0, "directivity must be >= 1"),),
        result_kind=Gain,
    )
)


def directivity(beam_solid_angle: SolidAngle | float) -> Gain:
    """D = 4 pi / Omega_A"""
    return DIRECTIVITY(beam_solid_angle)


_PATTERN_PRE = (callable_contract("pattern"), step_contract())

BEAM_SOLID_ANGLE = register(
    FormulaSpec(
        name="muwave.beam_solid_angle",
        params=(Param("pattern"), Param("step")),
        body=lambda pattern, step: integrate(pattern, step),
        preconditions=_PATTERN_PRE,
        result_kind=SolidAngle,
    )
)


def beam_solid_angle(pattern: AngularFunction, step: float | None = None) -> SolidAngle:
    """Beam solid angle ``integral P(theta, phi) dOmega`` over the upper hemisphere.

    A pattern that is zero everywhere has no beam and is reported as a
    ``result.domain`` postcondition failure.
    """
    return BEAM_SOLID_ANGLE(pattern, resolve_step(step))


ANTENNA_TEMP = register(
    FormulaSpec(
        name="muwave.antenna_temp",
        params=(Param("brightness"), Param("pattern"), Param("step")),
        body=lambda brightness, pattern, step: weighted_mean(brightness, pattern, step),
        preconditions=(callable_contract("brightness", "pattern"), step_contract()),
        result_kind=Temperature,
    )
)


def antenna_temp(brightness: AngularFunction, pattern: AngularFunction, step: float | None = None) -> Temperature:
    """Antenna temperature: the brightness map averaged with the antenna pattern as weight."""
    return ANTENNA_TEMP(brightness, pattern, resolve_step(step))


FORWARD_GAIN = register(
    FormulaSpec(
        name="muwave.forward_gain",
        params=(Param("efficiency", Efficiency), Param("pattern"), Param("step")),
        body=lambda efficiency, pattern, step: efficiency * 4.0 * PI / integrate(pattern, step),
        preconditions=(callable_contract("pattern"), step_contract()),
        result_kind=Gain,
    )
)


def forward_gain(efficiency: Efficiency | float, pattern: AngularFunction, step: float | None = None) -> Gain:
    """G = eta * D, with the directivity taken from the integrated pattern."""
    return FORWARD_GAIN(efficiency, pattern, resolve_step(step))


SPECTRAL_RADIANCE = register(
    FormulaSpec(
        name="muwave.spectral_radiance",
        params=(Param("brightness_temp", Temperature), Param("wavelength", Wavelength)),
        body=lambda brightness_temp, wavelength: 2.0 * K_B * brightness_temp / np.float64(wavelength) ** 2,
        postconditions=(result_positive(),),
        result_kind=SpectralRadiance,
    )
)

SPECTRAL_FLUX_DENSITY = register(
    FormulaSpec(
        name="muwave.spectral_flux_density",
        params=(Param("brightness_temp", Temperature), Param("wavelength", Wavelength), Param("solid_angle", SolidAngle)),
        body=lambda brightness_temp, wavelength, solid_angle: 2.0
        * K_B
        * brightness_temp
        * solid_angle
        / np.float64(wavelength) ** 2,
        postconditions=(result_positive(),),
        result_kind=SpectralFluxDensity,
    )
)


def spectral_radiance(brightness_temp: Temperature | float, wavelength: Wavelength | float) -> SpectralRadiance:
    """Rayleigh-Jeans spectral radiance per unit frequency, ``2 k T_b / lambda^2``."""
    return SPECTRAL_RADIANCE(brightness_temp, wavelength)


def spectral_flux_density(
    brightness_temp: Temperature | float, wavelength: Wavelength | float, solid_angle: SolidAngle | float
) -> SpectralFluxDensity:
    """Spectral flux density of a small source of solid angle ``solid_angle``."""
    return SPECTRAL_FLUX_DENSITY(brightness_temp, wavelength, solid_angle)


EFFECTIVE_AREA = register(
    FormulaSpec(
        name="muwave.effective_area",
        params=(Param("wavelength", Wavelength), Param("pattern"), Param("step")),
        body=lambda wavelength, pattern, step: np.float64(wavelength) ** 2 / integrate(pattern, step),
        preconditions=(callable_contract("pattern"), step_contract()),
        result_kind=Area,
    )
)


def effective_area(wavelength: Wavelength | float, pattern: AngularFunction, step: float | None = None) -> Area:
    """A_e = lambda^2 / Omega_A"""
    return EFFECTIVE_AREA(wavelength, pattern, resolve_step(step))


SENSITIVITY = register(
    FormulaSpec(
        name="muwave.sensitivity",
        params=(
            Param("sys_temp", Temperature),
            Param("c", default=5.0),
            Param("dt", Time, default=0.01),
            Param("df", Frequency, default=0.01),
        ),
        body=lambda sys_temp, c, dt, df: c * sys_temp / np.sqrt(np.float64(dt) * df),
        preconditions=(positive("c"), positive("dt", "integration time dt must be greater than zero")),
        postconditions=(result_positive(),),
        result_kind=Temperature,
    )
)


def sensitivity(
    sys_temp: Temperature | float,
    c: float = 5.0,
    dt: Time | float = 0.01,
    df: Frequency | float = 0.01,
) -> Temperature:
    """Radiometer sensitivity ``delta T = c T_sys / sqrt(dt df)``.

    ``c`` is the receiver-dependent constant, ``dt`` the integration time [s],
    ``df`` the bandwidth [Hz].
    """
    return SENSITIVITY(sys_temp, c, dt, df)


def _ratio(name: str, first: str, second: str, doc: str) -> FormulaSpec:
    # (first - second) / (first + second)
    return register(
        FormulaSpec(
            name=f"muwave.{name}",
            params=(Param(first, Temperature), Param(second, Temperature)),
            body=lambda **t: (t[first] - t[second]) / (t[first] + t[second]),
            result_kind=NormalizedDifference,
            description=doc,
        )
    )


XPGR = _ratio("xpgr", "t_19h", "t_37v", "cross-polarised gradient ratio (T19H - T37V) / (T19H + T37V)")
POLARIZATION_RATIO = _ratio("polarization_ratio", "t_19v", "t_19h", "(T19V - T19H) / (T19V + T19H)")
GRADIENT_RATIO = _ratio("gradient_ratio", "t_37v", "t_19v", "(T37V - T19V) / (T37V + T19V)")


def xpgr(t_19h: Temperature | float, t_37v: Temperature | float) -> NormalizedDifference:
    """Cross-polarised gradient ratio, used for wet snow detection."""
    return XPGR(t_19h=t_19h, t_37v=t_37v)


def polarization_ratio(t_19h: Temperature | float, t_19v: Temperature | float) -> NormalizedDifference:
    return POLARIZATION_RATIO(t_19v=t_19v, t_19h=t_19h)


def gradient_ratio(t_19v: Temperature | float, t_37v: Temperature | float) -> NormalizedDifference:
    return GRADIENT_RATIO(t_37v=t_37v, t_19v=t_19v)


def _upwelling(tau: float, temperature: Callable[[float], float], step: float) -> float:
    n = max(1, int(math.ceil(tau / step)))
    d = tau / n
    mid = (np.arange(n, dtype=np.float64) + 0.5) * d
    t = np.vectorize(temperature, otypes=[np.float64])(mid)
    return float(np.sum(t * np.exp(-mid)) * d)


UPWELLING_COMPONENT = register(
    FormulaSpec(
        name="muwave.upwelling_component",
        params=(Param("tau", OpticalDepth), Param("temperature"), Param("step")),
        body=_upwelling,
        preconditions=(
            positive("tau", "optical depth must be greater than zero"),
            requires("temperature_callable", "temperature", callable, "temperature must be callable as T(tau)"),
            step_contract(),
        ),
        result_kind=Temperature,
    )
)


def upwelling_component(
    tau: OpticalDepth | float, temperature: Callable[[float], float], step: float | None = None
) -> Temperature:
    """Upwelling brightness temperature of an absorbing atmosphere.

    ``T_up = integral_0^tau T(t) exp(-t) dt`` where ``temperature`` gives the
    physical temperature at optical depth ``t`` below the sensor. For an
    isothermal atmosphere this reduces to ``T_a (1 - exp(-tau))``.
    """
    return UPWELLING_COMPONENT(tau, temperature, resolve_step(step))
