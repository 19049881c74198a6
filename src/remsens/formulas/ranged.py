"""Ranging (lidar / radar altimetry) and scattering systems."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from remsens.constants import PI
from remsens.contracts import (
    FormulaSpec,
    Param,
    positive,
    requires,
    result_close_to,
    result_non_negative,
    same_length,
)
from remsens.quantity import BRDF, Angle, Distance, Frequency, Irradiance, Radiance, ScatteringCoefficient, Time, Velocity
from remsens.registry import register


# Airborne lidar defaults.
DEFAULT_RISE_TIME = 5.0e-9
DEFAULT_PLATFORM_SPEED = 50.0
DEFAULT_HEIGHT = 200.0
DEFAULT_PULSE_RATE = 1000.0
DEFAULT_BEAM_DIVERGENCE = 0.001


TRAVEL_TIME = register(
    FormulaSpec(
        name="ranged.travel_time",
        params=(Param("distance", Distance), Param("group_velocity", Velocity)),
        body=lambda distance, group_velocity: 2.0 * distance / group_velocity,
        preconditions=(positive("group_velocity"),),
        postconditions=(result_close_to(("distance", "group_velocity"), lambda r, v: 2.0 * r / v, "result must equal 2 R / v_g"),),
        result_kind=Time,
    )
)


def travel_time(distance: Distance | float, group_velocity: Velocity | float) -> Time:
    """Round-trip time of a pulse to a target at ``distance``."""
    return TRAVEL_TIME(distance, group_velocity)


def _rms_snr(signal: Sequence[float], noise: Sequence[float]) -> float:
    s = np.asarray(signal, dtype=np.float64)
    n = np.asarray(noise, dtype=np.float64)
    return np.sqrt(np.mean(s**2) / np.mean(n**2))


AVERAGING_RMS_SNR = register(
    FormulaSpec(
        name="ranged.averaging_rms_snr",
        params=(Param("signal"), Param("noise")),
        body=_rms_snr,
        preconditions=(
            same_length("signal", "noise"),
            requires("non_empty", "signal", lambda s: len(s) > 0, "signal must not be empty"),
            requires(
                "samples_finite",
                ("signal", "noise"),
                lambda s, n: bool(np.all(np.isfinite(np.asarray(s, dtype=np.float64))))
                and bool(np.all(np.isfinite(np.asarray(n, dtype=np.float64)))),
                "samples must be finite numbers",
            ),
        ),
        postconditions=(result_non_negative(),),
    )
)


def averaging_rms_snr(signal: Sequence[float], noise: Sequence[float]) -> float:
    """Ratio of RMS signal to RMS noise over equally long sample sequences.

    All-zero noise has no finite SNR and is reported as a numeric failure.
    """
    return AVERAGING_RMS_SNR(signal, noise)


ACCURACY = register(
    FormulaSpec(
        name="ranged.accuracy",
        params=(Param("rise_time", Time), Param("snr")),
        body=lambda rise_time, snr: rise_time / snr,
        preconditions=(positive("snr"),),
        result_kind=Time,
    )
)


def accuracy(rise_time: Time | float, snr: float) -> Time:
    """Timing accuracy of a pulse with ``rise_time`` at signal-to-noise ratio ``snr``."""
    return ACCURACY(rise_time, snr)


RANGE_ACCURACY = register(
    FormulaSpec(
        name="ranged.range_accuracy",
        params=(
            Param("group_velocity", Velocity),
            Param("rise_time", Time, default=DEFAULT_RISE_TIME),
            Param("snr", default=1.0),
            Param("platform_speed", Velocity, default=DEFAULT_PLATFORM_SPEED),
            Param("height", Distance, default=DEFAULT_HEIGHT),
            Param("pulse_rate", Frequency, default=DEFAULT_PULSE_RATE),
            Param("beam_divergence", Angle, default=DEFAULT_BEAM_DIVERGENCE),
        ),
        body=lambda group_velocity, rise_time, snr, platform_speed, height, pulse_rate, beam_divergence: group_velocity
        * rise_time
        / (2.0 * snr)
        * np.sqrt(np.float64(platform_speed) / (pulse_rate * height * beam_divergence)),
        preconditions=(positive("snr"), positive("height"), positive("beam_divergence")),
        result_kind=Distance,
    )
)


def range_accuracy(
    group_velocity: Velocity | float,
    rise_time: Time | float = DEFAULT_RISE_TIME,
    snr: float = 1.0,
    platform_speed: Velocity | float = DEFAULT_PLATFORM_SPEED,
    height: Distance | float = DEFAULT_HEIGHT,
    pulse_rate: Frequency | float = DEFAULT_PULSE_RATE,
    beam_divergence: Angle | float = DEFAULT_BEAM_DIVERGENCE,
) -> Distance:
    """Range accuracy of a scanning ranger averaging over all pulses in one footprint.

    Defaults describe an airborne lidar: 5 ns rise time, 50 m/s, 200 m
    altitude, 1 kHz pulse rate, 1 mrad beam divergence.
    """
    return RANGE_ACCURACY(group_velocity, rise_time, snr, platform_speed, height, pulse_rate, beam_divergence)


RANGE_AMBIGUITY = register(
    FormulaSpec(
        name="ranged.range_ambiguity",
        params=(Param("group_velocity", Velocity), Param("pulse_rate", Frequency, default=DEFAULT_PULSE_RATE)),
        body=lambda group_velocity, pulse_rate: group_velocity / (2.0 * pulse_rate),
        result_kind=Distance,
    )
)


def range_ambiguity(group_velocity: Velocity | float, pulse_rate: Frequency | float = DEFAULT_PULSE_RATE) -> Distance:
    """Maximum unambiguous range, ``v_g / (2 prf)``."""
    return RANGE_AMBIGUITY(group_velocity, pulse_rate)


MAX_PULSE_RATE = register(
    FormulaSpec(
        name="ranged.max_pulse_rate",
        params=(Param("group_velocity", Velocity), Param("height", Distance, default=DEFAULT_HEIGHT)),
        body=lambda group_velocity, height: group_velocity / (2.0 * height),
        preconditions=(positive("group_velocity"), positive("height")),
        result_kind=Frequency,
    )
)

IS_IDEAL_PULSE_RATE = register(
    FormulaSpec(
        name="ranged.is_ideal_pulse_rate",
        params=(
            Param("pulse_rate", Frequency),
            Param("group_velocity", Velocity),
            Param("height", Distance, default=DEFAULT_HEIGHT),
        ),
        body=lambda pulse_rate, group_velocity, height: pulse_rate < group_velocity / (2.0 * height),
        preconditions=(positive("height"),),
    )
)


def max_pulse_rate(group_velocity: Velocity | float, height: Distance | float = DEFAULT_HEIGHT) -> Frequency:
    """Highest pulse rate for which each echo from ``height`` returns before the next pulse."""
    return MAX_PULSE_RATE(group_velocity, height)


def is_ideal_pulse_rate(
    pulse_rate: Frequency | float, group_velocity: Velocity | float, height: Distance | float = DEFAULT_HEIGHT
) -> bool:
    return IS_IDEAL_PULSE_RATE(pulse_rate, group_velocity, height)


# ------------------------------ scattering ------------------------------


BRDF_BASIC = register(
    FormulaSpec(
        name="ranged.brdf_basic",
        params=(Param("radiance", Radiance), Param("irradiance", Irradiance)),
        body=lambda radiance, irradiance: radiance / irradiance,
        preconditions=(positive("irradiance"),),
        result_kind=BRDF,
    )
)


def brdf_basic(radiance: Radiance | float, irradiance: Irradiance | float) -> BRDF:
    """Simplest BRDF estimate, reflected radiance over incident irradiance."""
    return BRDF_BASIC(radiance, irradiance)


BISTATIC_SCATTERING_COEFFICIENT = register(
    FormulaSpec(
        name="ranged.bistatic_scattering_coefficient",
        params=(Param("brdf", BRDF), Param("angle", Angle)),
        body=lambda brdf, angle: 4.0 * PI * brdf * np.cos(angle),
        result_kind=ScatteringCoefficient,
    )
)

BISTATIC_SCATTERING_COEFFICIENT_BASIC = register(
    FormulaSpec(
        name="ranged.bistatic_scattering_coefficient_basic",
        params=(Param("radiance", Radiance), Param("irradiance", Irradiance), Param("angle", Angle)),
        body=lambda radiance, irradiance, angle: 4.0 * PI * (radiance / irradiance) * np.cos(angle),
        preconditions=(positive("irradiance"),),
        result_kind=ScatteringCoefficient,
    )
)


def bistatic_scattering_coefficient(brdf: BRDF | float, angle: Angle | float) -> ScatteringCoefficient:
    """gamma = 4 pi R cos(theta), with ``angle`` the incidence angle."""
    return BISTATIC_SCATTERING_COEFFICIENT(brdf, angle)


def bistatic_scattering_coefficient_basic(
    radiance: Radiance | float, irradiance: Irradiance | float, angle: Angle | float
) -> ScatteringCoefficient:
    """:func:`bistatic_scattering_coefficient` of the :func:`brdf_basic` estimate."""
    return BISTATIC_SCATTERING_COEFFICIENT_BASIC(radiance, irradiance, angle)
