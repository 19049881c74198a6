"""Typed physical quantities with enforced domains.

A :class:`Quantity` pairs a float magnitude with a *kind* (the subclass). The
kind fixes the unit and the admissible domain, including whether each bound is
inclusive. Construction validates the magnitude; a Quantity that exists is
always finite and inside its domain.

Quantities are immutable and deliberately define no arithmetic, so an
``Angle`` can never silently flow into a slot that expects a ``Wavelength``.
Conversions between kinds are explicit functions
(see :mod:`remsens.conversions`).

Examples
--------
>>> Wavelength(500e-9).magnitude
5e-07
>>> construct("Reflectance", 1.5)
Traceback (most recent call last):
...
remsens.errors.DomainError: DOMAIN: Reflectance magnitude 1.5 is outside [0, 1]
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from typing import Any, ClassVar

from remsens.constants import C, PI
from remsens.errors import DomainError


@dataclass(frozen=True)
class Domain:
    """Interval of admissible magnitudes with explicit boundary types."""

    lower: float = -math.inf
    upper: float = math.inf
    lower_closed: bool = True
    upper_closed: bool = True

    @classmethod
    def real(cls) -> "Domain":
        return cls()

    @classmethod
    def positive(cls) -> "Domain":
        return cls(lower=0.0, lower_closed=False)

    @classmethod
    def non_negative(cls) -> "Domain":
        return cls(lower=0.0)

    @classmethod
    def closed(cls, lower: float, upper: float) -> "Domain":
        return cls(lower=lower, upper=upper)

    @classmethod
    def half_open(cls, lower: float, upper: float) -> "Domain":
        """``[lower, upper)``"""
        return cls(lower=lower, upper=upper, upper_closed=False)

    def contains(self, x: float) -> bool:
        if math.isnan(x):
            return False
        lo_ok = x >= self.lower if self.lower_closed else x > self.lower
        hi_ok = x <= self.upper if self.upper_closed else x < self.upper
        return lo_ok and hi_ok

    def describe(self) -> str:
        lb = "[" if (self.lower_closed and math.isfinite(self.lower)) else "("
        ub = "]" if (self.upper_closed and math.isfinite(self.upper)) else ")"
        return f"{lb}{self.lower:.6g}, {self.upper:.6g}{ub}"


_KINDS: dict[str, type["Quantity"]] = {}


def _as_real(kind: str, x: Any, domain: Domain) -> float:
    if isinstance(x, bool) or not isinstance(x, numbers.Real):
        raise DomainError(
            kind=kind,
            magnitude=x,
            domain=domain.describe(),
            message=f"{kind} magnitude must be a real number, got {type(x).__name__}",
        )
    v = float(x)
    if not math.isfinite(v):
        raise DomainError(
            kind=kind,
            magnitude=v,
            domain=domain.describe(),
            message=f"{kind} magnitude must be finite, got {v!r}",
        )
    return v


@dataclass(frozen=True)
class Quantity:
    """Base class of all quantity kinds. Not constructible itself."""

    magnitude: float

    unit: ClassVar[str] = ""
    domain: ClassVar[Domain | None] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if cls.__name__ in _KINDS:
            raise TypeError(f"Quantity kind '{cls.__name__}' is already defined")
        _KINDS[cls.__name__] = cls

    def __post_init__(self) -> None:
        cls = type(self)
        if cls.domain is None:
            raise TypeError(f"{cls.__name__} has no domain; construct a concrete quantity kind")
        v = _as_real(cls.__name__, self.magnitude, cls.domain)
        if not cls.domain.contains(v):
            raise DomainError(kind=cls.__name__, magnitude=v, domain=cls.domain.describe())
        object.__setattr__(self, "magnitude", v)

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __float__(self) -> float:
        return self.magnitude

    def __str__(self) -> str:
        return f"{self.magnitude:.6g} {self.unit}".rstrip()


def kind_by_name(name: str) -> type[Quantity]:
    try:
        return _KINDS[str(name)]
    except KeyError:
        raise KeyError(f"Unknown quantity kind: {name!r}") from None


def list_kinds() -> dict[str, type[Quantity]]:
    return dict(_KINDS)


def construct(kind: type[Quantity] | str, magnitude: Any) -> Quantity:
    """Build a Quantity of ``kind`` (class or registered name).

    Raises :class:`~remsens.errors.DomainError` when ``magnitude`` is not a
    finite real number inside the kind's domain.
    """
    cls = kind_by_name(kind) if isinstance(kind, str) else kind
    return cls(magnitude)


def magnitude_of(value: Any) -> Any:
    """Unwrap Quantities (also inside tuples); leave everything else as is."""
    if isinstance(value, Quantity):
        return value.magnitude
    if isinstance(value, tuple):
        return tuple(magnitude_of(v) for v in value)
    return value


# ------------------------------ spectral ------------------------------


class Wavelength(Quantity):
    unit = "m"
    domain = Domain.positive()


class Frequency(Quantity):
    unit = "Hz"
    domain = Domain.positive()


class AngularFrequency(Quantity):
    unit = "rad/s"
    domain = Domain.positive()


class WaveNumber(Quantity):
    unit = "rad/m"
    domain = Domain.positive()


class SpatialFrequency(Quantity):
    """Line pairs per metre."""

    unit = "1/m"
    domain = Domain.positive()


# ------------------------------ angles ------------------------------


class Angle(Quantity):
    """Zenith / incidence / view angle, measured from the surface normal."""

    unit = "rad"
    domain = Domain.closed(0.0, PI / 2.0)


class Azimuth(Quantity):
    """Full-circle angle."""

    unit = "rad"
    domain = Domain.half_open(0.0, 2.0 * PI)


class AngleDegrees(Quantity):
    unit = "deg"
    domain = Domain.closed(0.0, 90.0)


class AzimuthDegrees(Quantity):
    unit = "deg"
    domain = Domain.half_open(0.0, 360.0)


class SolidAngle(Quantity):
    unit = "sr"
    domain = Domain(lower=0.0, upper=4.0 * PI, lower_closed=False)


# ------------------------------ dimensionless ------------------------------


class Reflectance(Quantity):
    unit = ""
    domain = Domain.closed(0.0, 1.0)


class Emissivity(Quantity):
    unit = ""
    domain = Domain(lower=0.0, upper=1.0, lower_closed=False)


class Efficiency(Quantity):
    unit = ""
    domain = Domain.closed(0.0, 1.0)


class NormalizedDifference(Quantity):
    """(a - b) / (a + b) style ratios."""

    unit = ""
    domain = Domain.closed(-1.0, 1.0)


class Gain(Quantity):
    unit = ""
    domain = Domain.non_negative()


class OpticalDepth(Quantity):
    unit = ""
    domain = Domain.non_negative()


class FNumber(Quantity):
    unit = ""
    domain = Domain.positive()


class ScatteringCoefficient(Quantity):
    unit = ""
    domain = Domain.non_negative()


# ------------------------------ radiometry ------------------------------


class Radiance(Quantity):
    unit = "W m-2 sr-1"
    domain = Domain.non_negative()


class SpectralRadiance(Quantity):
    unit = "W m-2 sr-1 (per spectral unit)"
    domain = Domain.non_negative()


class SpectralFluxDensity(Quantity):
    unit = "W m-2 Hz-1"
    domain = Domain.non_negative()


class Irradiance(Quantity):
    unit = "W m-2"
    domain = Domain.non_negative()


class Intensity(Quantity):
    """Relative image intensity (any linear unit)."""

    unit = ""
    domain = Domain.non_negative()


class Luminance(Quantity):
    unit = "cd m-2"
    domain = Domain.non_negative()


class Illuminance(Quantity):
    unit = "lx"
    domain = Domain.non_negative()


class BRDF(Quantity):
    unit = "sr-1"
    domain = Domain.non_negative()


class FieldAmplitude(Quantity):
    unit = "V/m"
    domain = Domain.real()


# ------------------------------ mechanics / geometry ------------------------------


class Distance(Quantity):
    unit = "m"
    domain = Domain.non_negative()


class Coordinate(Quantity):
    """Signed position along one axis (image plane or object space)."""

    unit = "m"
    domain = Domain.real()


class Area(Quantity):
    unit = "m2"
    domain = Domain.positive()


class Velocity(Quantity):
    unit = "m/s"
    domain = Domain.closed(0.0, C)


class Time(Quantity):
    unit = "s"
    domain = Domain.non_negative()


class Energy(Quantity):
    unit = "J"
    domain = Domain.non_negative()


class Power(Quantity):
    unit = "W"
    domain = Domain.non_negative()


# ------------------------------ thermal ------------------------------


class Temperature(Quantity):
    unit = "K"
    domain = Domain.positive()


class HeatCapacity(Quantity):
    unit = "J kg-1 K-1"
    domain = Domain.positive()


class Density(Quantity):
    unit = "kg m-3"
    domain = Domain.positive()


class ThermalConductivity(Quantity):
    unit = "W m-1 K-1"
    domain = Domain.positive()


class ThermalInertia(Quantity):
    unit = "J m-2 K-1 s-1/2"
    domain = Domain.positive()


class Diffusivity(Quantity):
    unit = "m2/s"
    domain = Domain.positive()
