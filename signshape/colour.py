"""Colour-space conversions used to segment traffic signs.

Images are ``numpy`` arrays of shape ``(rows, cols, 3)`` holding 8-bit
pixels in blue, green, red channel order.
"""

from __future__ import annotations

import math

import numpy as np

from signshape.mathutils import get_maximum, get_minimum

_TWO_PI = 2.0 * math.pi


def retrieve_theta(r: float, g: float, b: float) -> float:
    """Return the hue angle in radians, in [0, pi].

    The angle is undefined for grey pixels (r == g == b); NaN is returned then.
    """
    denominator_sq = r * r + g * g + b * b - r * g - r * b - g * b
    denominator = math.sqrt(max(denominator_sq, 0.0))
    if denominator == 0.0:
        return math.nan
    ratio = (r - g * 0.5 - b * 0.5) / denominator
    return math.acos(min(1.0, max(-1.0, ratio)))


def retrieve_normalised_hue(r: float, g: float, b: float) -> float:
    """Return the hue scaled to [0, 255]: theta if b <= g, else 2*pi - theta."""
    theta = retrieve_theta(r, g, b)
    if b <= g:
        return theta * 255.0 / _TWO_PI
    return (_TWO_PI - theta) * 255.0 / _TWO_PI


def retrieve_luminance(r: float, g: float, b: float) -> float:
    """Return the luminance 0.210 R + 0.715 G + 0.072 B."""
    return 0.210 * r + 0.715 * g + 0.072 * b


def retrieve_saturation(r: float, g: float, b: float) -> float:
    """Return the saturation max(R, G, B) - min(R, G, B)."""
    return get_maximum(r, g, b) - get_minimum(r, g, b)


def _check_bgr(bgr_image: np.ndarray) -> np.ndarray:
    image = np.asarray(bgr_image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError("expected an image with three channels")
    return image


def rgb_to_log_rb(bgr_image: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Return the log-chromatic images ``(log(R/G), log(B/G))`` as float32.

    A zero green value is replaced by one to avoid dividing by zero; a zero
    red or blue value yields minus infinity.
    """
    image = _check_bgr(bgr_image)
    blue = image[..., 0].astype(np.float32)
    green = image[..., 1].astype(np.float32)
    red = image[..., 2].astype(np.float32)

    division = np.float32(1.0) / np.where(green == 0, np.float32(1.0), green)
    with np.errstate(divide="ignore"):
        log_r = np.log(red * division).astype(np.float32)
        log_b = np.log(blue * division).astype(np.float32)
    return log_r, log_b


def convert_rgb_to_ihls(bgr_image: np.ndarray) -> np.ndarray:
    """Convert a BGR image to IHLS.

    The result is an 8-bit image whose channels are saturation, luminance
    and normalised hue, in that order. Grey pixels get a hue of zero.
    """
    image = _check_bgr(bgr_image)
    blue = image[..., 0].astype(np.float64)
    green = image[..., 1].astype(np.float64)
    red = image[..., 2].astype(np.float64)

    saturation = np.maximum(np.maximum(red, green), blue) - np.minimum(
        np.minimum(red, green), blue
    )

    luminance = (
        np.float32(0.210) * red.astype(np.float32)
        + np.float32(0.715) * green.astype(np.float32)
        + np.float32(0.072) * blue.astype(np.float32)
    )

    numerator = red - green * 0.5 - blue * 0.5
    denominator_sq = (
        red * red + green * green + blue * blue
        - red * green - red * blue - green * blue
    )
    with np.errstate(invalid="ignore", divide="ignore"):
        denominator = np.sqrt(np.maximum(denominator_sq, 0.0))
        theta = np.arccos(np.clip(numerator / denominator, -1.0, 1.0))
    hue = np.where(blue <= green, theta, _TWO_PI - theta) * 255.0 / _TWO_PI
    hue = np.nan_to_num(hue, nan=0.0)

    channels = [
        np.clip(np.trunc(channel), 0, 255).astype(np.uint8)
        for channel in (saturation, luminance, hue)
    ]
    return np.stack(channels, axis=-1)