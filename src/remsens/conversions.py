"""Explicit angle conversions.

Quantity kinds never convert implicitly; these registered formulas are the
only way from degrees to radians and back. Each pair is an exact inverse up
to floating point rounding.
"""

from __future__ import annotations

import math

from remsens.contracts import FormulaSpec, Param, result_close_to
from remsens.quantity import Angle, AngleDegrees, Azimuth, AzimuthDegrees
from remsens.registry import register


DEGREES_TO_ANGLE = register(
    FormulaSpec(
        name="conversions.degrees_to_angle",
        params=(Param("degrees", AngleDegrees),),
        body=lambda degrees: math.radians(degrees),
        postconditions=(result_close_to("degrees", lambda d: d * math.pi / 180.0, "result must equal degrees * pi / 180"),),
        result_kind=Angle,
    )
)

ANGLE_TO_DEGREES = register(
    FormulaSpec(
        name="conversions.angle_to_degrees",
        params=(Param("angle", Angle),),
        body=lambda angle: math.degrees(angle),
        postconditions=(result_close_to("angle", lambda a: a * 180.0 / math.pi, "result must equal angle * 180 / pi"),),
        result_kind=AngleDegrees,
    )
)

DEGREES_TO_AZIMUTH = register(
    FormulaSpec(
        name="conversions.degrees_to_azimuth",
        params=(Param("degrees", AzimuthDegrees),),
        body=lambda degrees: math.radians(degrees),
        result_kind=Azimuth,
    )
)

AZIMUTH_TO_DEGREES = register(
    FormulaSpec(
        name="conversions.azimuth_to_degrees",
        params=(Param("azimuth", Azimuth),),
        body=lambda azimuth: math.degrees(azimuth),
        result_kind=AzimuthDegrees,
    )
)


def degrees_to_angle(degrees: AngleDegrees | float) -> Angle:
    return DEGREES_TO_ANGLE(degrees)


def angle_to_degrees(angle: Angle | float) -> AngleDegrees:
    return ANGLE_TO_DEGREES(angle)


def degrees_to_azimuth(degrees: AzimuthDegrees | float) -> Azimuth:
    return DEGREES_TO_AZIMUTH(degrees)


def azimuth_to_degrees(azimuth: Azimuth | float) -> AzimuthDegrees:
    return AZIMUTH_TO_DEGREES(azimuth)
