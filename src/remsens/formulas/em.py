"""Electromagnetic radiation in free space.

Wave relations, photon energy, field flux density, relativistic Doppler ratio,
hemispherical irradiance, and the Rayleigh-Jeans / Stefan-Boltzmann
black-body expressions.
"""

from __future__ import annotations

import numpy as np

from remsens.constants import C, H, K_B, PI, SIGMA, Z_0
from remsens.contracts import (
    FormulaSpec,
    Param,
    requires,
    result_close_to,
    result_positive,
)
from remsens.formulas.hemisphere import AngularFunction, callable_contract, integrate, resolve_step, step_contract
from remsens.quantity import (
    AngularFrequency,
    Azimuth,
    Energy,
    FieldAmplitude,
    Frequency,
    Irradiance,
    SpectralRadiance,
    Temperature,
    Velocity,
    Wavelength,
    WaveNumber,
)
from remsens.registry import register


ANGULAR_FREQUENCY = register(
    FormulaSpec(
        name="em.angular_frequency",
        params=(Param("frequency", Frequency),),
        body=lambda frequency: 2.0 * PI * frequency,
        postconditions=(
            result_positive(),
            result_close_to("frequency", lambda f: f * 2.0 * PI, "result must equal 2 pi f"),
        ),
        result_kind=AngularFrequency,
    )
)

EM_WAVELENGTH = register(
    FormulaSpec(
        name="em.em_wavelength",
        params=(Param("frequency", Frequency),),
        body=lambda frequency: C / frequency,
        postconditions=(
            result_positive(),
            result_close_to("frequency", lambda f: C / f, "result must equal c / f"),
        ),
        result_kind=Wavelength,
    )
)

EM_FREQUENCY = register(
    FormulaSpec(
        name="em.em_frequency",
        params=(Param("wavelength", Wavelength),),
        body=lambda wavelength: C / wavelength,
        postconditions=(
            result_positive(),
            result_close_to("wavelength", lambda w: C / w, "result must equal c / lambda"),
        ),
        result_kind=Frequency,
    )
)

WAVE_NUMBER = register(
    FormulaSpec(
        name="em.wave_number",
        params=(Param("wavelength", Wavelength),),
        body=lambda wavelength: 2.0 * PI / wavelength,
        postconditions=(result_positive(),),
        result_kind=WaveNumber,
    )
)

PHOTON_ENERGY = register(
    FormulaSpec(
        name="em.photon_energy",
        params=(Param("frequency", Frequency),),
        body=lambda frequency: H * frequency,
        postconditions=(result_positive(),),
        result_kind=Energy,
    )
)

# Amplitudes may be negative; only their square matters.
FLUX_DENSITY = register(
    FormulaSpec(
        name="em.flux_density",
        params=(Param("amplitude", FieldAmplitude),),
        body=lambda amplitude: amplitude**2 / (2.0 * Z_0),
        result_kind=Irradiance,
    )
)


def _doppler_ratio(velocity: float, angle: float) -> float:
    beta = np.float64(velocity) / C
    return np.sqrt(1.0 - beta**2) / (1.0 - beta * np.cos(angle))


DOPPLER_RATIO = register(
    FormulaSpec(
        name="em.doppler_ratio",
        params=(Param("velocity", Velocity), Param("angle", Azimuth)),
        body=_doppler_ratio,
        preconditions=(
            requires("velocity_below_c", "velocity", lambda v: v < C, "You cannot go the speed of light!"),
        ),
        postconditions=(result_positive(),),
    )
)

IRRADIANCE = register(
    FormulaSpec(
        name="em.irradiance",
        params=(Param("radiance"), Param("step")),
        body=lambda radiance, step: integrate(radiance, step, projected=True),
        preconditions=(callable_contract("radiance"), step_contract()),
        result_kind=Irradiance,
        description="Irradiance (incoming L) or radiant exitance (outgoing L) from a radiance pattern",
    )
)

SPECTRAL_RADIANCE_F = register(
    FormulaSpec(
        name="em.spectral_radiance_f",
        params=(Param("temperature", Temperature), Param("frequency", Frequency)),
        body=lambda temperature, frequency: 2.0 * K_B * temperature * np.float64(frequency) ** 2 / C**2,
        postconditions=(result_positive(),),
        result_kind=SpectralRadiance,
    )
)

SPECTRAL_RADIANCE_LAMBDA = register(
    FormulaSpec(
        name="em.spectral_radiance_lambda",
        params=(Param("temperature", Temperature), Param("wavelength", Wavelength)),
        body=lambda temperature, wavelength: 2.0 * C * K_B * temperature / np.float64(wavelength) ** 4,
        postconditions=(result_positive(),),
        result_kind=SpectralRadiance,
    )
)

BB_RADIATION = register(
    FormulaSpec(
        name="em.bb_radiation",
        params=(Param("temperature", Temperature),),
        body=lambda temperature: SIGMA * np.float64(temperature) ** 4,
        postconditions=(result_positive(),),
        result_kind=Irradiance,
    )
)


def angular_frequency(frequency: Frequency | float) -> AngularFrequency:
    """omega = 2 pi f"""
    return ANGULAR_FREQUENCY(frequency)


def em_wavelength(frequency: Frequency | float) -> Wavelength:
    """Free-space wavelength of a wave of the given frequency (lambda = c / f)."""
    return EM_WAVELENGTH(frequency)


def em_frequency(wavelength: Wavelength | float) -> Frequency:
    """Inverse of :func:`em_wavelength`."""
    return EM_FREQUENCY(wavelength)


def wave_number(wavelength: Wavelength | float) -> WaveNumber:
    return WAVE_NUMBER(wavelength)


def photon_energy(frequency: Frequency | float) -> Energy:
    """E = h f, in joules."""
    return PHOTON_ENERGY(frequency)


def flux_density(amplitude: FieldAmplitude | float) -> Irradiance:
    """Time-averaged power flux density of a plane wave with field amplitude E0.

    F = E0^2 / (2 Z0), Z0 being the impedance of free space.
    """
    return FLUX_DENSITY(amplitude)


def doppler_ratio(velocity: Velocity | float, angle: Azimuth | float) -> float:
    """Relativistic Doppler ratio f'/f for a source moving at ``velocity``.

    ``angle`` is the angle between the velocity and the line of sight, in
    radians on the full circle. Velocity must be strictly below c.
    """
    return DOPPLER_RATIO(velocity, angle)


def irradiance(radiance: AngularFunction, step: float | None = None) -> Irradiance:
    """Integrate a radiance pattern L(theta, phi) over the hemisphere.

    With incoming radiance this is the irradiance E; with outgoing radiance it
    is the radiant exitance M. Both are ``integral L cos(theta) dOmega``.

    Parameters
    ----------
    radiance
        Callable ``L(theta, phi)`` in W m-2 sr-1. Must be non-negative; a
        negative pattern is reported as a ``result.domain`` postcondition
        failure.
    step
        Angular step [rad]; defaults to the configured ``integration_step``.
    """
    return IRRADIANCE(radiance, resolve_step(step))


def spectral_radiance_f(temperature: Temperature | float, frequency: Frequency | float) -> SpectralRadiance:
    """Rayleigh-Jeans spectral radiance per unit frequency: 2 k T f^2 / c^2."""
    return SPECTRAL_RADIANCE_F(temperature, frequency)


def spectral_radiance_lambda(temperature: Temperature | float, wavelength: Wavelength | float) -> SpectralRadiance:
    """Rayleigh-Jeans spectral radiance per unit wavelength: 2 c k T / lambda^4."""
    return SPECTRAL_RADIANCE_LAMBDA(temperature, wavelength)


def bb_radiation(temperature: Temperature | float) -> Irradiance:
    """Total black-body exitance, sigma T^4."""
    return BB_RADIATION(temperature)
