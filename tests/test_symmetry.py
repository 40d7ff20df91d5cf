import numpy as np
import pytest

from signshape.symmetry import (
    gradient_thresh,
    mass_center_by_voting,
    mass_center_discovery,
    orientations_from_gradient,
    radial_symmetry_detector,
    rgb_to_float_gray,
    round_matrix,
)


def _disc_image(size, cx, cy, radius, value=200):
    ys, xs = np.mgrid[0:size, 0:size]
    mask = (xs - cx) ** 2 + (ys - cy) ** 2 <= radius ** 2
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[mask] = value
    return image


def _square_image(size, cx, cy, half, value=200):
    image = np.zeros((size, size, 3), dtype=np.uint8)
    image[cy - half:cy + half + 1, cx - half:cx + half + 1] = value
    return image


def test_round_matrix_rounds_halves_to_even():
    result = round_matrix(np.array([[0.5, 1.5, 2.5, -1.4, 3.6]], dtype=np.float32))
    assert result.dtype == np.float32
    assert result.tolist() == [[0.0, 2.0, 2.0, -1.0, 4.0]]


def test_gray_of_uniform_colour_keeps_level():
    image = np.full((4, 5, 3), 77, dtype=np.uint8)
    gray = rgb_to_float_gray(image)
    assert gray.dtype == np.float32
    assert gray.shape == (4, 5)
    assert np.all(gray == 77.0)


def test_gray_weights_first_channel_more_than_third():
    first = np.zeros((1, 1, 3), dtype=np.uint8)
    first[0, 0, 0] = 255
    third = np.zeros((1, 1, 3), dtype=np.uint8)
    third[0, 0, 2] = 255
    assert rgb_to_float_gray(first)[0, 0] > rgb_to_float_gray(third)[0, 0]


def test_gray_rejects_single_channel():
    with pytest.raises(ValueError):
        rgb_to_float_gray(np.zeros((3, 3), dtype=np.uint8))


def test_gradient_thresh_zeroes_weak_pixels():
    magnitude = np.array([[10.0, 0.5, 5.0]], dtype=np.float32)
    gx = np.ones((1, 3), dtype=np.float32)
    gy = np.full((1, 3), 2.0, dtype=np.float32)
    new_mag, new_gx, new_gy = gradient_thresh(magnitude, gx, gy)
    assert new_mag.tolist() == [[10.0, 0.0, 5.0]]
    assert new_gx.tolist() == [[1.0, 0.0, 1.0]]
    assert new_gy.tolist() == [[2.0, 0.0, 2.0]]
    assert magnitude[0, 1] == pytest.approx(0.5)


def test_orientations_bar_is_perpendicular_gradient():
    rng = np.random.default_rng(3)
    gx = rng.normal(size=(4, 4)).astype(np.float32)
    gy = rng.normal(size=(4, 4)).astype(np.float32)
    _, _, bar_x, bar_y = orientations_from_gradient(gx, gy, 4)
    np.testing.assert_array_equal(bar_x, gy)
    np.testing.assert_array_equal(bar_y, -gx)


def test_orientations_single_edge_keeps_gradient():
    rng = np.random.default_rng(5)
    gx = rng.normal(size=(3, 6)).astype(np.float32)
    gy = rng.normal(size=(3, 6)).astype(np.float32)
    vp_x, vp_y, _, _ = orientations_from_gradient(gx, gy, 1)
    np.testing.assert_allclose(vp_x, gx, atol=1e-5)
    np.testing.assert_allclose(vp_y, gy, atol=1e-5)


@pytest.mark.parametrize("edges", [3, 4, 8, 12])
def test_orientations_preserve_gradient_length(edges):
    rng = np.random.default_rng(edges)
    gx = rng.normal(size=(5, 5)).astype(np.float32)
    gy = rng.normal(size=(5, 5)).astype(np.float32)
    vp_x, vp_y, _, _ = orientations_from_gradient(gx, gy, edges)
    np.testing.assert_allclose(np.hypot(vp_x, vp_y), np.hypot(gx, gy), rtol=1e-4)


def test_square_edges_vote_in_one_direction():
    gx = np.array([[1.0, -1.0, 0.0, 0.0]], dtype=np.float32)
    gy = np.array([[0.0, 0.0, 1.0, -1.0]], dtype=np.float32)
    vp_x, vp_y, _, _ = orientations_from_gradient(gx, gy, 4)
    np.testing.assert_allclose(vp_x, np.ones((1, 4)), atol=1e-5)
    np.testing.assert_allclose(vp_y, np.zeros((1, 4)), atol=1e-5)


def test_voting_without_votes_gives_nan():
    zeros = np.zeros((20, 20), dtype=np.float32)
    x, y = mass_center_by_voting(zeros, zeros, zeros, zeros, zeros, zeros, zeros, 5.0, 4)
    assert (str(float(x)), str(float(y))) == ("nan", "nan")


def test_voting_rejects_zero_edges():
    zeros = np.zeros((8, 8), dtype=np.float32)
    with pytest.raises(ValueError):
        mass_center_by_voting(zeros, zeros, zeros, zeros, zeros, zeros, zeros, 3.0, 0)


def test_detector_on_uniform_image_finds_nothing():
    image = np.full((30, 30, 3), 90, dtype=np.uint8)
    x, y = radial_symmetry_detector(image, 8, 4)
    assert (str(float(x)), str(float(y))) == ("nan", "nan")


def test_detector_finds_disc_centre():
    cx, cy = 32, 30
    image = _disc_image(64, cx, cy, 12)
    x, y = radial_symmetry_detector(image, 12, 12)
    assert abs(x - cx) <= 3
    assert abs(y - cy) <= 3


def test_detector_finds_square_centre():
    cx, cy = 30, 33
    image = _square_image(64, cx, cy, 12)
    x, y = radial_symmetry_detector(image, 12, 4)
    assert abs(x - cx) <= 3
    assert abs(y - cy) <= 3


def test_mass_center_discovery_on_disc_is_near_origin():
    cx, cy, radius = 32, 30, 12
    image = _disc_image(64, cx, cy, radius)
    angles = np.linspace(0, 2 * np.pi, 72, endpoint=False)
    contour = np.column_stack([np.cos(angles), np.sin(angles)]).astype(np.float32)
    translation = np.eye(3, dtype=np.float32)
    translation[0, 2] = -cx
    translation[1, 2] = -cy
    identity = np.eye(3, dtype=np.float32)
    x, y = mass_center_discovery(
        image, translation, identity, identity, contour, float(radius), 2
    )
    assert abs(x) < 0.3
    assert abs(y) < 0.3


def test_mass_center_discovery_rejects_unknown_type():
    image = _disc_image(32, 16, 16, 6)
    contour = np.array([[1.0, 0.0], [0.0, 1.0], [-1.0, 0.0]], dtype=np.float32)
    identity = np.eye(3, dtype=np.float32)
    with pytest.raises(ValueError):
        mass_center_discovery(image, identity, identity, identity, contour, 6.0, 7)