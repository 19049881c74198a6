from __future__ import annotations

import math

import numpy as np
import pytest

from remsens.errors import NumericError, PostconditionError, PreconditionError
from remsens.formulas import photographic as ph
from remsens.quantity import Coordinate, Distance, SpatialFrequency


@pytest.mark.parametrize("r", [1.0, 50.0, 2.5e4])
def test_resolution_distance_round_trip(r):
    d = ph.distance_from_resolution(r)
    assert isinstance(d, Distance)
    back = ph.resolution_from_distance(d)
    assert isinstance(back, SpatialFrequency)
    assert back.magnitude == pytest.approx(r, rel=1e-9)


def test_distance_from_resolution_value():
    assert ph.distance_from_resolution(50.0).magnitude == pytest.approx(0.01)


def test_resolution_from_zero_distance_rejected():
    with pytest.raises(PreconditionError) as e:
        ph.resolution_from_distance(0.0)
    assert e.value.violation.contract == "distance_positive"


def test_modulation():
    assert ph.modulation(3.0, 1.0).magnitude == pytest.approx(0.5)
    with pytest.raises(PreconditionError) as e:
        ph.modulation(1.0, 1.0)
    assert e.value.violation.contract == "max_above_min"


@pytest.mark.parametrize("obj, img", [(2.0, 0.05), (10.0, 0.2), (0.5, 0.5)])
def test_thin_lens_round_trip(obj, img):
    f = ph.focal_len(obj, img)
    assert f.magnitude == pytest.approx(1.0 / (1.0 / obj + 1.0 / img))
    assert ph.actual_dist(img, f).magnitude == pytest.approx(obj, rel=1e-9)


def test_actual_dist_needs_image_beyond_focus():
    with pytest.raises(PreconditionError) as e:
        ph.actual_dist(0.05, 0.05)
    assert e.value.violation.contract == "image_beyond_focus"


def test_film_illuminance():
    assert ph.film_illuminance(2.0, 1000.0).magnitude == pytest.approx(math.pi * 1000.0 / 16.0)
    with pytest.raises(PreconditionError) as e:
        ph.film_illuminance(0.0, 1000.0)
    assert e.value.violation.contract == "f_number.domain"


def test_radial_distort_returns_new_point():
    x, y = ph.radial_distort(3.0, 4.0, 0.1)
    assert isinstance(x, Coordinate) and isinstance(y, Coordinate)
    assert (x.magnitude, y.magnitude) == pytest.approx((4.5, 6.0))

    x0, y0 = ph.radial_distort(-3.0, 4.0, slope=0.0)
    assert (x0.magnitude, y0.magnitude) == pytest.approx((-3.0, 4.0))


def test_radial_distort_default_slope():
    x, y = ph.radial_distort(0.0, 2.0)
    assert (x.magnitude, y.magnitude) == pytest.approx((0.0, 2.4))


def test_image_location():
    u, v = ph.image_location((0.0, 0.0, 100.0), (10.0, 20.0, 0.0), 0.05)
    assert (u.magnitude, v.magnitude) == pytest.approx((-0.005, -0.01))


def test_image_location_preconditions():
    with pytest.raises(PreconditionError) as e:
        ph.image_location((0.0, 0.0, 5.0), (10.0, 20.0, 5.0), 0.05)
    assert e.value.violation.contract == "depth_nonzero"

    with pytest.raises(PreconditionError) as e:
        ph.image_location((0.0, 0.0), (10.0, 20.0, 5.0), 0.05)
    assert e.value.violation.contract == "camera_point"


def test_principal_point_and_ground_distance_are_inverse():
    r = ph.principal_point_distance(0.15, 300.0, 1500.0)
    assert r.magnitude == pytest.approx(0.03)
    assert ph.ground_dist(0.15, r, 1500.0).magnitude == pytest.approx(300.0)


def test_relief_displacement():
    d = ph.relief_displacement(0.15, 300.0, 1500.0, 50.0)
    assert d.magnitude == pytest.approx(50.0 * 0.03 / 1450.0)

    with pytest.raises(PreconditionError) as e:
        ph.relief_displacement(0.15, 300.0, 50.0, 50.0)
    assert e.value.violation.contract == "camera_above_object"


def test_overlap_size():
    assert ph.overlap_size(1000.0, 0.15, 500.0, 0.23).magnitude == pytest.approx(0.23 * 1000.0 / 0.15 - 500.0)

    with pytest.raises(PostconditionError) as e:
        ph.overlap_size(1000.0, 0.15, 2000.0, 0.23)
    assert e.value.violation.contract == "frames_overlap"


def test_find_coordinate_recovers_point():
    f, h, bx = 0.1, 1000.0, 100.0
    X, Y, Z = 50.0, 20.0, 100.0
    depth = h - Z
    img_1 = (f * X / depth, f * Y / depth)
    img_2 = (f * (X - bx) / depth, f * Y / depth)

    x, y, z = ph.find_coordinate(img_1, img_2, f, (bx, 0.0), h)
    assert (x.magnitude, y.magnitude, z.magnitude) == pytest.approx((X, Y, Z), rel=1e-9)


def test_find_coordinate_zero_parallax_is_numeric_failure():
    with pytest.raises(NumericError) as e:
        ph.find_coordinate((0.01, 0.02), (0.01, 0.02), 0.1, (100.0, 0.0), 1000.0)
    assert e.value.failure.reason == "division_by_zero"


def test_contrast():
    assert ph.contrast(0.8, 0.2).magnitude == pytest.approx(0.6)
    assert ph.contrast(0.5, 0.5).magnitude == 0.0

    with pytest.raises(PreconditionError) as e:
        ph.contrast(0.2, 0.8)
    assert e.value.violation.contract == "max_not_below_min"

    with pytest.raises(NumericError):
        ph.contrast(0.0, 0.0)


def test_img_contrast():
    img = np.array([[0.2, 0.8], [0.5, 0.4]])
    assert ph.img_contrast(img).magnitude == pytest.approx(0.6)
    assert ph.img_contrast([[1.0, 1.0, 3.0]]).magnitude == pytest.approx(0.5)


@pytest.mark.parametrize(
    "img, contract",
    [
        ([], "image_2d"),
        ([1.0, 2.0], "image_2d"),
        ([[1.0, 2.0], [3.0]], "image_2d"),
        ([[1.0, -1.0]], "pixels_valid"),
        ([[1.0, float("nan")]], "pixels_valid"),
    ],
)
def test_img_contrast_preconditions(img, contract):
    with pytest.raises(PreconditionError) as e:
        ph.img_contrast(img)
    assert e.value.violation.contract == contract


def test_img_contrast_black_image_is_numeric_failure():
    with pytest.raises(NumericError):
        ph.img_contrast(np.zeros((3, 3)))
