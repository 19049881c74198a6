"""Photographic systems: lens geometry, film exposure, photogrammetry.

Image-plane coordinates are measured from the principal point (image centre),
not from a corner. Object-space points are ``(X, Y, Z)`` tuples in metres with
Z up.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from remsens.constants import PI
from remsens.contracts import (
    FormulaSpec,
    Param,
    ensures,
    positive,
    requires,
    result_close_to,
    result_non_negative,
    result_positive,
)
from remsens.quantity import (
    Coordinate,
    Distance,
    FNumber,
    Illuminance,
    Intensity,
    Luminance,
    NormalizedDifference,
    Radiance,
    SpatialFrequency,
)
from remsens.registry import register


Point2 = Sequence[float]
Point3 = Sequence[float]


# ------------------------------ resolution ------------------------------


DISTANCE_FROM_RESOLUTION = register(
    FormulaSpec(
        name="photographic.distance_from_resolution",
        params=(Param("resolution", SpatialFrequency),),
        body=lambda resolution: 1.0 / (2.0 * resolution),
        postconditions=(
            result_positive(),
            result_close_to("resolution", lambda r: 0.5 / r, "result must equal 1 / (2 r)"),
        ),
        result_kind=Distance,
    )
)

RESOLUTION_FROM_DISTANCE = register(
    FormulaSpec(
        name="photographic.resolution_from_distance",
        params=(Param("distance", Distance),),
        body=lambda distance: 1.0 / (2.0 * distance),
        preconditions=(positive("distance"),),
        postconditions=(result_positive(),),
        result_kind=SpatialFrequency,
    )
)


def distance_from_resolution(resolution: SpatialFrequency | float) -> Distance:
    """Smallest resolvable distance for a resolution of ``resolution`` line pairs per metre."""
    return DISTANCE_FROM_RESOLUTION(resolution)


def resolution_from_distance(distance: Distance | float) -> SpatialFrequency:
    """Inverse of :func:`distance_from_resolution`."""
    return RESOLUTION_FROM_DISTANCE(distance)


MODULATION = register(
    FormulaSpec(
        name="photographic.modulation",
        params=(Param("i_max", Intensity), Param("i_min", Intensity)),
        body=lambda i_max, i_min: (i_max - i_min) / (i_max + i_min),
        preconditions=(
            requires("max_above_min", ("i_max", "i_min"), lambda mx, mn: mx > mn, "i_max must be greater than i_min"),
            requires("sum_positive", ("i_max", "i_min"), lambda mx, mn: mx + mn > 0.0, "i_max + i_min must be positive"),
        ),
        postconditions=(result_positive(),),
        result_kind=NormalizedDifference,
    )
)


def modulation(i_max: Intensity | float, i_min: Intensity | float) -> NormalizedDifference:
    """Modulation (Michelson contrast) of a periodic target."""
    return MODULATION(i_max, i_min)


# ------------------------------ thin lens ------------------------------


FOCAL_LEN = register(
    FormulaSpec(
        name="photographic.focal_len",
        params=(Param("obj_dist", Distance), Param("image_dist", Distance)),
        body=lambda obj_dist, image_dist: 1.0 / (1.0 / obj_dist + 1.0 / image_dist),
        preconditions=(positive("obj_dist"), positive("image_dist")),
        postconditions=(result_positive(),),
        result_kind=Distance,
    )
)

ACTUAL_DIST = register(
    FormulaSpec(
        name="photographic.actual_dist",
        params=(Param("image_dist", Distance), Param("focal_len", Distance)),
        body=lambda image_dist, focal_len: 1.0 / (1.0 / focal_len - 1.0 / image_dist),
        preconditions=(
            positive("focal_len"),
            requires(
                "image_beyond_focus",
                ("image_dist", "focal_len"),
                lambda i, f: i > f,
                "image distance must be greater than the focal length for a real object",
            ),
        ),
        postconditions=(result_positive(),),
        result_kind=Distance,
    )
)


def focal_len(obj_dist: Distance | float, image_dist: Distance | float) -> Distance:
    """Thin lens: ``1/f = 1/o + 1/i``."""
    return FOCAL_LEN(obj_dist, image_dist)


def actual_dist(image_dist: Distance | float, focal_len: Distance | float) -> Distance:
    """Object distance from image distance and focal length (thin lens)."""
    return ACTUAL_DIST(image_dist, focal_len)


FILM_ILLUMINANCE = register(
    FormulaSpec(
        name="photographic.film_illuminance",
        params=(Param("f_number", FNumber), Param("luminance", Luminance)),
        body=lambda f_number, luminance: PI * luminance / (4.0 * f_number**2),
        result_kind=Illuminance,
    )
)


def film_illuminance(f_number: FNumber | float, luminance: Luminance | float) -> Illuminance:
    """Illuminance on the film for a scene of ``luminance`` through a lens at ``f_number``.

    E = pi L / (4 N^2)
    """
    return FILM_ILLUMINANCE(f_number, luminance)


# ------------------------------ image geometry ------------------------------


def _radial_distort(x: float, y: float, slope: float) -> tuple[float, float]:
    scale = 1.0 + slope * np.hypot(x, y)
    return x * scale, y * scale


RADIAL_DISTORT = register(
    FormulaSpec(
        name="photographic.radial_distort",
        params=(Param("x", Coordinate), Param("y", Coordinate), Param("slope", default=0.1)),
        body=_radial_distort,
        preconditions=(requires("slope_real", "slope", np.isfinite, "slope must be a finite number"),),
        result_kind=(Coordinate, Coordinate),
    )
)


def radial_distort(x: Coordinate | float, y: Coordinate | float, slope: float = 0.1) -> tuple[Coordinate, Coordinate]:
    """Radially distorted image of the point ``(x, y)``.

    Each coordinate is scaled by ``L(r) = 1 + slope * r``; a positive slope
    gives pincushion distortion, a negative one barrel distortion. Returns a
    new point; nothing is modified in place.
    """
    return RADIAL_DISTORT(x, y, slope)


def _is_point(n: int):
    def check(p: object) -> bool:
        return len(p) == n and all(np.isfinite(float(v)) for v in p)

    return check


def _image_location(camera: Point3, obj: Point3, focal_length: float) -> tuple[float, float]:
    dx, dy, dz = (float(o) - float(c) for o, c in zip(obj, camera))
    return focal_length * dx / dz, focal_length * dy / dz


IMAGE_LOCATION = register(
    FormulaSpec(
        name="photographic.image_location",
        params=(Param("camera"), Param("obj"), Param("focal_length", Distance)),
        body=_image_location,
        preconditions=(
            requires("camera_point", "camera", _is_point(3), "camera must be a finite (x, y, z) point"),
            requires("object_point", "obj", _is_point(3), "obj must be a finite (x, y, z) point"),
            positive("focal_length"),
            requires(
                "depth_nonzero",
                ("camera", "obj"),
                lambda c, o: float(o[2]) != float(c[2]),
                "object and camera must not lie in the same z plane",
            ),
        ),
        result_kind=(Coordinate, Coordinate),
    )
)


def image_location(camera: Point3, obj: Point3, focal_length: Distance | float) -> tuple[Coordinate, Coordinate]:
    """Project an object-space point onto the image plane of a pinhole camera."""
    return IMAGE_LOCATION(camera, obj, focal_length)


_HEIGHTS = (positive("focal_length"), positive("camera_height"))

PRINCIPAL_POINT_DISTANCE = register(
    FormulaSpec(
        name="photographic.principal_point_distance",
        params=(Param("focal_length", Distance), Param("ground_dist", Distance), Param("camera_height", Distance)),
        body=lambda focal_length, ground_dist, camera_height: focal_length * ground_dist / camera_height,
        preconditions=_HEIGHTS,
        result_kind=Distance,
    )
)

GROUND_DIST = register(
    FormulaSpec(
        name="photographic.ground_dist",
        params=(Param("focal_length", Distance), Param("image_dist", Distance), Param("camera_height", Distance)),
        body=lambda focal_length, image_dist, camera_height: image_dist * camera_height / focal_length,
        preconditions=_HEIGHTS,
        result_kind=Distance,
    )
)


def principal_point_distance(
    focal_length: Distance | float, ground_dist: Distance | float, camera_height: Distance | float
) -> Distance:
    """Image distance from the principal point of a ground point ``ground_dist`` from nadir."""
    return PRINCIPAL_POINT_DISTANCE(focal_length, ground_dist, camera_height)


def ground_dist(
    focal_length: Distance | float, image_dist: Distance | float, camera_height: Distance | float
) -> Distance:
    """Inverse of :func:`principal_point_distance`."""
    return GROUND_DIST(focal_length, image_dist, camera_height)


RELIEF_DISPLACEMENT = register(
    FormulaSpec(
        name="photographic.relief_displacement",
        params=(
            Param("focal_length", Distance),
            Param("ground_dist", Distance),
            Param("camera_height", Distance),
            Param("object_height", Distance),
        ),
        body=lambda focal_length, ground_dist, camera_height, object_height: object_height
        * (focal_length * ground_dist / camera_height)
        / (camera_height - object_height),
        preconditions=(
            positive("focal_length"),
            positive("object_height"),
            requires(
                "camera_above_object",
                ("camera_height", "object_height"),
                lambda h, o: h > o,
                "camera_height must be greater than object_height",
            ),
        ),
        result_kind=Distance,
    )
)


def relief_displacement(
    focal_length: Distance | float,
    ground_dist: Distance | float,
    camera_height: Distance | float,
    object_height: Distance | float,
) -> Distance:
    """Image displacement of the top of a vertical object relative to its base."""
    return RELIEF_DISPLACEMENT(focal_length, ground_dist, camera_height, object_height)


# ------------------------------ stereo ------------------------------


OVERLAP_SIZE = register(
    FormulaSpec(
        name="photographic.overlap_size",
        params=(
            Param("height", Distance),
            Param("focal_length", Distance),
            Param("baseline", Distance),
            Param("film_width", Distance),
        ),
        body=lambda height, focal_length, baseline, film_width: film_width * height / focal_length - baseline,
        preconditions=(positive("focal_length"),),
        postconditions=(
            ensures(
                "frames_overlap",
                "result",
                lambda r: r >= 0.0,
                "baseline exceeds the ground footprint; the frames do not overlap",
            ),
        ),
        result_kind=Distance,
    )
)


def overlap_size(
    height: Distance | float,
    focal_length: Distance | float,
    baseline: Distance | float,
    film_width: Distance | float,
) -> Distance:
    """Ground length covered by both frames of a stereo pair."""
    return OVERLAP_SIZE(height, focal_length, baseline, film_width)


def _find_coordinate(
    image_1: Point2, image_2: Point2, focal_length: float, baseline: Point2, height: float
) -> tuple[float, float, float]:
    u1, v1 = (float(v) for v in image_1)
    u2, v2 = (float(v) for v in image_2)
    bx, by = (float(v) for v in baseline)
    # c = |B| / parallax = (H - Z) / f
    c = (bx**2 + by**2) / ((u1 - u2) * bx + (v1 - v2) * by)
    return c * u1, c * v1, height - focal_length * c


FIND_COORDINATE = register(
    FormulaSpec(
        name="photographic.find_coordinate",
        params=(
            Param("image_1"),
            Param("image_2"),
            Param("focal_length", Distance),
            Param("baseline"),
            Param("height", Coordinate),
        ),
        body=_find_coordinate,
        preconditions=(
            requires("image_1_point", "image_1", _is_point(2), "image_1 must be a finite (u, v) point"),
            requires("image_2_point", "image_2", _is_point(2), "image_2 must be a finite (u, v) point"),
            requires("baseline_vector", "baseline", _is_point(2), "baseline must be a finite (bx, by) vector"),
            positive("focal_length"),
        ),
        result_kind=(Coordinate, Coordinate, Coordinate),
    )
)


def find_coordinate(
    image_1: Point2,
    image_2: Point2,
    focal_length: Distance | float,
    baseline: Point2,
    height: Coordinate | float,
) -> tuple[Coordinate, Coordinate, Coordinate]:
    """Object-space ``(X, Y, Z)`` of a point seen in both frames of a vertical stereo pair.

    Parameters
    ----------
    image_1, image_2
        ``(u, v)`` of the point in the first and second frame.
    focal_length
        Camera focal length [m].
    baseline
        ``(bx, by)`` displacement of the second exposure station [m].
    height
        Flying height of the camera [m].

    Zero parallax along the baseline has no solution and is reported as a
    numeric failure.
    """
    return FIND_COORDINATE(image_1, image_2, focal_length, baseline, height)


# ------------------------------ contrast ------------------------------


CONTRAST = register(
    FormulaSpec(
        name="photographic.contrast",
        params=(Param("r_max", Radiance), Param("r_min", Radiance)),
        body=lambda r_max, r_min: (r_max - r_min) / (r_max + r_min),
        preconditions=(
            requires("max_not_below_min", ("r_max", "r_min"), lambda mx, mn: mx >= mn, "r_max must be >= r_min"),
        ),
        postconditions=(result_non_negative(),),
        result_kind=NormalizedDifference,
    )
)


def contrast(r_max: Radiance | float, r_min: Radiance | float) -> NormalizedDifference:
    return CONTRAST(r_max, r_min)


def _is_image(img: object) -> bool:
    arr = np.asarray(img, dtype=np.float64)
    return arr.ndim == 2 and arr.size > 0


def _image_contrast(img) -> float:
    arr = np.asarray(img, dtype=np.float64)
    mx, mn = arr.max(), arr.min()
    return (mx - mn) / (mx + mn)


IMG_CONTRAST = register(
    FormulaSpec(
        name="photographic.img_contrast",
        params=(Param("img"),),
        body=_image_contrast,
        preconditions=(
            requires("image_2d", "img", _is_image, "img must be a non-empty rectangular 2D array"),
            requires(
                "pixels_valid",
                "img",
                lambda img: bool(np.all(np.isfinite(img)) and np.all(np.asarray(img) >= 0.0)),
                "pixel values must be finite and >= 0",
            ),
        ),
        postconditions=(result_non_negative(),),
        result_kind=NormalizedDifference,
    )
)


def img_contrast(img) -> NormalizedDifference:
    """Contrast between the brightest and darkest pixel of a greyscale image.

    ``img`` is anything :func:`numpy.asarray` turns into a 2D float array.
    An all-black image has no defined contrast (numeric failure).
    """
    return IMG_CONTRAST(img)
