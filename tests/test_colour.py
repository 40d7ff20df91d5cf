import math

import numpy as np
import pytest

from signshape.colour import (
    convert_rgb_to_ihls,
    retrieve_luminance,
    retrieve_normalised_hue,
    retrieve_saturation,
    retrieve_theta,
    rgb_to_log_rb,
)


def test_pure_red_has_zero_hue():
    assert retrieve_theta(255.0, 0.0, 0.0) == pytest.approx(0.0)
    assert retrieve_normalised_hue(255.0, 0.0, 0.0) == pytest.approx(0.0)


def test_grey_has_undefined_theta():
    theta = retrieve_theta(80.0, 80.0, 80.0)
    assert str(float(theta)) == "nan"


def test_theta_lies_in_zero_to_pi():
    for r, g, b in [(10, 200, 30), (0, 0, 255), (120, 40, 90), (1, 2, 3)]:
        theta = retrieve_theta(float(r), float(g), float(b))
        assert 0.0 <= theta <= math.pi


def test_hue_of_green_and_blue_is_symmetric():
    green = retrieve_normalised_hue(0.0, 255.0, 0.0)
    blue = retrieve_normalised_hue(0.0, 0.0, 255.0)
    assert green + blue == pytest.approx(255.0)
    assert green < blue


def test_luminance_coefficients():
    assert retrieve_luminance(1.0, 0.0, 0.0) == pytest.approx(0.210)
    assert retrieve_luminance(0.0, 1.0, 0.0) == pytest.approx(0.715)
    assert retrieve_luminance(0.0, 0.0, 1.0) == pytest.approx(0.072)


def test_saturation_is_spread_of_channels():
    assert retrieve_saturation(10.0, 200.0, 50.0) == pytest.approx(190.0)
    assert retrieve_saturation(7.0, 7.0, 7.0) == 0.0


def test_log_rb_shapes_and_dtype():
    image = np.zeros((4, 5, 3), dtype=np.uint8)
    image[...] = (30, 60, 90)
    log_r, log_b = rgb_to_log_rb(image)
    assert log_r.shape == (4, 5)
    assert log_b.shape == (4, 5)
    assert log_r.dtype == np.float32
    assert log_b.dtype == np.float32


def test_log_rb_equal_channels_give_zero():
    image = np.full((3, 3, 3), 77, dtype=np.uint8)
    log_r, log_b = rgb_to_log_rb(image)
    assert np.allclose(log_r, 0.0)
    assert np.allclose(log_b, 0.0)


def test_log_rb_zero_green_uses_unit_divisor():
    image = np.array([[[20, 0, 50]]], dtype=np.uint8)
    log_r, log_b = rgb_to_log_rb(image)
    assert log_r[0, 0] == pytest.approx(math.log(50.0), rel=1e-6)
    assert log_b[0, 0] == pytest.approx(math.log(20.0), rel=1e-6)


def test_log_rb_zero_red_is_minus_infinity():
    image = np.array([[[10, 10, 0]]], dtype=np.uint8)
    log_r, _ = rgb_to_log_rb(image)
    assert float(log_r[0, 0]) == -math.inf


def test_log_rb_processes_every_pixel_of_a_large_image():
    rng = np.random.default_rng(3)
    image = rng.integers(1, 256, size=(130, 140, 3), dtype=np.uint8)
    log_r, log_b = rgb_to_log_rb(image)
    expected_r = np.log(image[..., 2].astype(np.float32) / image[..., 1].astype(np.float32))
    assert np.allclose(log_r, expected_r, atol=1e-5)
    assert np.all(np.isfinite(log_b))


def test_ihls_matches_scalar_functions():
    pixels = [(30, 60, 200), (200, 10, 10), (5, 180, 90), (100, 100, 100)]
    image = np.array([pixels], dtype=np.uint8)
    ihls = convert_rgb_to_ihls(image)
    assert ihls.dtype == np.uint8
    assert ihls.shape == (1, 4, 3)
    for idx, (b, g, r) in enumerate(pixels):
        s, lum, h = (int(v) for v in ihls[0, idx])
        assert s == int(retrieve_saturation(float(r), float(g), float(b)))
        assert abs(lum - int(retrieve_luminance(float(r), float(g), float(b)))) <= 1
        hue = retrieve_normalised_hue(float(r), float(g), float(b))
        expected_h = 0 if math.isnan(hue) else int(hue)
        assert abs(h - expected_h) <= 1


def test_ihls_of_grey_has_zero_hue_and_saturation():
    image = np.full((2, 2, 3), 128, dtype=np.uint8)
    ihls = convert_rgb_to_ihls(image)
    assert ihls[..., 0].tolist() == [[0, 0], [0, 0]]
    assert ihls[..., 2].tolist() == [[0, 0], [0, 0]]


def test_ihls_rejects_wrong_channel_count():
    with pytest.raises(ValueError):
        convert_rgb_to_ihls(np.zeros((3, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        convert_rgb_to_ihls(np.zeros((3, 3, 4), dtype=np.uint8))


def test_log_rb_rejects_wrong_channel_count():
    with pytest.raises(ValueError):
        rgb_to_log_rb(np.zeros((3, 3, 1), dtype=np.uint8))