"""Radial symmetry detector that estimates the centre of a traffic sign.

Each strong gradient pixel casts votes along a short line at distance
``radius`` from itself, and the densest vote area gives the centre. Images
are ``numpy`` arrays; colour images hold their three channels in the last
axis.
"""

from __future__ import annotations

import math
import sys
from collections.abc import Iterable, Sequence

import numpy as np
from scipy import ndimage

from signshape.contour import (
    THRESH_BINARY,
    THRESH_GRAD_RAD_DET,
    denormalise_contour,
    extract_min_max,
    normalise_point_fixed_factor,
    radius_estimation,
    roi_dimension_definition,
    roi_extraction,
)
from signshape.imageprocessing import (
    forward_transformation_point,
    inverse_transformation_contour,
)

_DERIVATIVE_X = np.array(
    [
        [0.0041, 0.0104, 0.0, -0.0104, -0.0041],
        [0.0273, 0.0689, 0.0, -0.0689, -0.0273],
        [0.0467, 0.1180, 0.0, -0.1180, -0.0467],
        [0.0273, 0.0689, 0.0, -0.0689, -0.0273],
        [0.0041, 0.0104, 0.0, -0.0104, -0.0041],
    ],
    dtype=np.float32,
)
_DERIVATIVE_Y = np.ascontiguousarray(_DERIVATIVE_X.T)

# Number of edges of each sign type; type 4 also halves the radius.
_EDGES_BY_SIGN_TYPE = {0: 3, 1: 4, 2: 12, 3: 8, 4: 3}

# Fixed Gaussian kernels used when no sigma is given.
_SMALL_GAUSSIAN_KERNELS = {
    1: [1.0],
    3: [0.25, 0.5, 0.25],
    5: [0.0625, 0.25, 0.375, 0.25, 0.0625],
    7: [0.03125, 0.109375, 0.21875, 0.28125, 0.21875, 0.109375, 0.03125],
}

_BORDER = 5
_CUBIC_A = -0.75


def _safe_divide(numerator: np.ndarray, denominator) -> np.ndarray:
    """Divide element-wise, giving zero wherever the denominator is zero."""
    num = np.asarray(numerator, dtype=np.float32)
    den = np.broadcast_to(np.asarray(denominator, dtype=np.float32), num.shape)
    out = np.zeros_like(num)
    np.divide(num, den, out=out, where=den != 0)
    return out


def _gaussian_kernel(ksize: int, sigma: float) -> np.ndarray:
    if ksize == 1:
        return np.ones(1)
    if sigma <= 0:
        if ksize in _SMALL_GAUSSIAN_KERNELS:
            return np.asarray(_SMALL_GAUSSIAN_KERNELS[ksize])
        sigma = 0.3 * ((ksize - 1) * 0.5 - 1) + 0.8
    offsets = np.arange(ksize) - (ksize - 1) * 0.5
    kernel = np.exp(-0.5 / (sigma * sigma) * offsets * offsets)
    return kernel / kernel.sum()


def _gaussian_blur(image: np.ndarray, ksize: int, sigma: float, mode: str) -> np.ndarray:
    kernel = _gaussian_kernel(ksize, sigma)
    blurred = ndimage.correlate1d(image.astype(np.float64), kernel, axis=1, mode=mode)
    blurred = ndimage.correlate1d(blurred, kernel, axis=0, mode=mode)
    return blurred.astype(np.float32)


def _cubic_weights(fraction: np.ndarray) -> list[np.ndarray]:
    a = _CUBIC_A
    x1 = fraction + 1.0
    x2 = 1.0 - fraction
    c0 = ((a * x1 - 5 * a) * x1 + 8 * a) * x1 - 4 * a
    c1 = ((a + 2) * fraction - (a + 3)) * fraction * fraction + 1
    c2 = ((a + 2) * x2 - (a + 3)) * x2 * x2 + 1
    return [c0, c1, c2, 1.0 - c0 - c1 - c2]


def _warp_perspective(image: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Warp with bicubic interpolation and a replicated border."""
    source = np.asarray(image)
    rows, cols = source.shape[:2]
    pixels = source.reshape(rows, cols, -1).astype(np.float64)

    ys, xs = np.mgrid[0:rows, 0:cols]
    destination = np.vstack([xs.ravel(), ys.ravel(), np.ones(rows * cols)])
    mapped = np.linalg.inv(np.asarray(matrix, dtype=np.float64)) @ destination
    w = mapped[2]
    scale = np.divide(1.0, w, out=np.zeros_like(w), where=w != 0)
    sx = mapped[0] * scale
    sy = mapped[1] * scale

    x0 = np.floor(sx)
    y0 = np.floor(sy)
    wx = _cubic_weights(sx - x0)
    wy = _cubic_weights(sy - y0)
    x0 = x0.astype(np.int64)
    y0 = y0.astype(np.int64)

    result = np.zeros((rows * cols, pixels.shape[2]))
    for dy, weight_y in enumerate(wy):
        yi = np.clip(y0 + dy - 1, 0, rows - 1)
        for dx, weight_x in enumerate(wx):
            xi = np.clip(x0 + dx - 1, 0, cols - 1)
            result += (weight_y * weight_x)[:, None] * pixels[yi, xi]

    result = result.reshape(source.shape)
    if np.issubdtype(source.dtype, np.integer):
        info = np.iinfo(source.dtype)
        return np.clip(np.rint(result), info.min, info.max).astype(source.dtype)
    return result.astype(source.dtype)


def rgb_to_float_gray(original_image: np.ndarray) -> np.ndarray:
    """Convert a three-channel image to a float32 grey image.

    The first channel is weighted as red (0.299), the second as green
    (0.587) and the third as blue (0.114). 8-bit input is rounded to whole
    grey levels.
    """
    image = np.asarray(original_image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError("expected an image with three channels")
    if image.dtype == np.uint8:
        channels = image.astype(np.int64)
        gray = (
            channels[..., 0] * 4899
            + channels[..., 1] * 9617
            + channels[..., 2] * 1868
            + (1 << 13)
        ) >> 14
        return gray.astype(np.float32)
    channels = image.astype(np.float32)
    gray = (
        channels[..., 0] * np.float32(0.299)
        + channels[..., 1] * np.float32(0.587)
        + channels[..., 2] * np.float32(0.114)
    )
    return gray.astype(np.float32)


def gradient_thresh(
    magnitude_image: np.ndarray, gradient_x: np.ndarray, gradient_y: np.ndarray
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Zero every pixel whose magnitude is below a tenth of the largest one.

    Returns new ``(magnitude, gradient_x, gradient_y)`` arrays.
    """
    magnitude = np.array(magnitude_image, dtype=np.float32)
    gx = np.array(gradient_x, dtype=np.float32)
    gy = np.array(gradient_y, dtype=np.float32)
    if magnitude.size == 0:
        return magnitude, gx, gy
    threshold = np.float32(float(magnitude.max()) * THRESH_GRAD_RAD_DET)
    weak = magnitude < threshold
    magnitude[weak] = 0.0
    gx[weak] = 0.0
    gy[weak] = 0.0
    return magnitude, gx, gy


def orientations_from_gradient(
    gradient_x: np.ndarray, gradient_y: np.ndarray, edges_number: int
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Return ``(vp_x, vp_y, bar_x, bar_y)`` for an ``edges_number``-gon.

    ``vp`` is the gradient rotated so that its angle is multiplied by the
    number of edges; ``bar`` is the gradient turned by a right angle.
    """
    gx = np.asarray(gradient_x, dtype=np.float32)
    gy = np.asarray(gradient_y, dtype=np.float32)

    gp_radian = np.arctan2(gy, gx).astype(np.float32)
    gp_degree = (gp_radian.astype(np.float64) * 180.0).astype(np.float32) / np.float32(
        math.pi
    )
    vp_degree = np.fmod(gp_degree * np.float32(edges_number), np.float32(360.0))
    theta = (
        (vp_degree - gp_degree).astype(np.float64) * math.pi
    ).astype(np.float32) / np.float32(180.0)

    cos_theta = np.cos(theta).astype(np.float32)
    sin_theta = np.sin(theta).astype(np.float32)
    vp_x = (cos_theta * gx - sin_theta * gy).astype(np.float32)
    vp_y = (sin_theta * gx + cos_theta * gy).astype(np.float32)
    return vp_x, vp_y, gy.copy(), (-gx).astype(np.float32)


def round_matrix(original_matrix: np.ndarray) -> np.ndarray:
    """Round every element to the nearest integer, halves to even, as float32."""
    return np.rint(np.asarray(original_matrix, dtype=np.float32)).astype(np.float32)


def mass_center_by_voting(
    magnitude_image: np.ndarray,
    gradient_x: np.ndarray,
    gradient_y: np.ndarray,
    gradient_bar_x: np.ndarray,
    gradient_bar_y: np.ndarray,
    gradient_vp_x: np.ndarray,
    gradient_vp_y: np.ndarray,
    radius: float,
    edges_number: int,
) -> tuple[float, float]:
    """Return the ``(x, y)`` centre found by voting, rounded up.

    Only the left and top borders of the vote images are cleared. When no
    pixel votes, the centre is ``(nan, nan)``.
    """
    magnitude = np.asarray(magnitude_image, dtype=np.float32)
    gx = np.asarray(gradient_x, dtype=np.float32)
    gy = np.asarray(gradient_y, dtype=np.float32)
    bar_x = np.asarray(gradient_bar_x, dtype=np.float32)
    bar_y = np.asarray(gradient_bar_y, dtype=np.float32)
    vp_x = np.asarray(gradient_vp_x, dtype=np.float32)
    vp_y = np.asarray(gradient_vp_y, dtype=np.float32)
    if edges_number <= 0:
        raise ValueError("the number of edges must be positive")
    rows, cols = magnitude.shape
    radius32 = np.float32(radius)

    coord_y, coord_x = np.mgrid[0:rows, 0:cols].astype(np.float32)
    offset_x = round_matrix(radius32 * gx)
    offset_y = round_matrix(radius32 * gy)
    pos_x = np.clip(coord_x + offset_x, 1, None)
    pos_y = np.clip(coord_y + offset_y, 1, None)
    neg_x = np.clip(coord_x - offset_x, 1, None)
    neg_y = np.clip(coord_y - offset_y, 1, None)
    pos_x = np.minimum(pos_x, cols - 1)
    neg_x = np.minimum(neg_x, cols - 1)
    pos_y = np.minimum(pos_y, rows - 1)
    neg_y = np.minimum(neg_y, rows - 1)

    w = int(math.ceil(float(radius32) * math.tan(math.pi / float(edges_number))))

    voters = magnitude != 0
    origins = [
        (pos_x[voters].astype(np.int64), pos_y[voters].astype(np.int64)),
        (neg_x[voters].astype(np.int64), neg_y[voters].astype(np.int64)),
    ]
    line_x = bar_x[voters]
    line_y = bar_y[voters]
    vote_x = vp_x[voters].astype(np.float64)
    vote_y = vp_y[voters].astype(np.float64)

    orientation = np.zeros((rows, cols))
    br_x = np.zeros((rows, cols))
    br_y = np.zeros((rows, cols))

    def cast(m: int, weight: float) -> None:
        step_x = np.ceil(np.float32(m) * line_x).astype(np.int64)
        step_y = np.ceil(np.float32(m) * line_y).astype(np.int64)
        for base_x, base_y in origins:
            lx = base_x + step_x
            ly = base_y + step_y
            inside = (lx >= 0) & (lx < cols) & (ly >= 0) & (ly < rows)
            target = (ly[inside], lx[inside])
            np.add.at(orientation, target, weight)
            np.add.at(br_x, target, weight * vote_x[inside])
            np.add.at(br_y, target, weight * vote_y[inside])

    for m in range(-w, w + 1):
        cast(m, 1.0)
    for m in range(-2 * w, -w):
        cast(m, -1.0)
    for m in range(w + 1, 2 * w + 1):
        cast(m, -1.0)

    orientation = orientation.astype(np.float32)
    br = np.hypot(br_x.astype(np.float32), br_y.astype(np.float32)).astype(np.float32)

    orientation[:, :_BORDER] = 0.0
    br[:, :_BORDER] = 0.0
    orientation[:_BORDER, :] = 0.0
    br[:_BORDER, :] = 0.0

    if edges_number == 12:
        sr = orientation * orientation
    else:
        sr = orientation * br
    sr = _safe_divide(sr, (2.0 * float(np.float32(w) * radius32)) ** 2)

    sigma = 0.2 * float(radius32)
    mask_size = int(math.ceil(6 * sigma))
    if mask_size % 2 == 0:
        mask_size += 1
    mask_size = max(mask_size, 1)
    sr_blurred = _gaussian_blur(sr, mask_size, sigma, mode="constant")

    low = float(sr_blurred.min())
    high = float(sr_blurred.max())
    spread = high - low
    scale = 1.0 / spread if spread > sys.float_info.epsilon else 0.0
    s = ((sr_blurred.astype(np.float64) - low) * scale).astype(np.float32)

    threshold = np.float32(float(s.max()) * THRESH_BINARY)
    ys, xs = np.nonzero(s > threshold)
    if len(xs) == 0:
        return math.nan, math.nan
    count = np.float32(len(xs))
    center_x = math.ceil(float(np.float32(xs.sum()) / count))
    center_y = math.ceil(float(np.float32(ys.sum()) / count))
    return float(center_x), float(center_y)


def radial_symmetry_detector(
    roi_image: np.ndarray, radius: int, edges_number: int
) -> tuple[float, float]:
    """Return the ``(x, y)`` centre of a regular ``edges_number``-gon in the image."""
    gray = rgb_to_float_gray(roi_image)
    blurred = _gaussian_blur(gray, 3, 0.0, mode="mirror")

    gradient_x = ndimage.correlate(blurred, -_DERIVATIVE_X, mode="mirror").astype(
        np.float32
    )
    gradient_y = ndimage.correlate(blurred, -_DERIVATIVE_Y, mode="mirror").astype(
        np.float32
    )
    magnitude = np.hypot(gradient_x, gradient_y).astype(np.float32)
    gradient_x = _safe_divide(gradient_x, magnitude)
    gradient_y = _safe_divide(gradient_y, magnitude)

    magnitude, gradient_x, gradient_y = gradient_thresh(
        magnitude, gradient_x, gradient_y
    )
    vp_x, vp_y, bar_x, bar_y = orientations_from_gradient(
        gradient_x, gradient_y, edges_number
    )
    return mass_center_by_voting(
        magnitude,
        gradient_x,
        gradient_y,
        bar_x,
        bar_y,
        vp_x,
        vp_y,
        float(np.float32(radius)),
        edges_number,
    )


def mass_center_discovery(
    original_image: np.ndarray,
    translation_matrix: np.ndarray,
    rotation_matrix: np.ndarray,
    scaling_matrix: np.ndarray,
    contour: Iterable[Sequence[float]],
    factor: float,
    type_traffic_sign: int,
) -> tuple[float, float]:
    """Estimate the centre of a normalised, distortion-corrected contour.

    The image is warped to undo the distortion, a region around the
    contour is searched with the radial symmetry detector, and the centre
    is returned in the contour's normalised frame. ``type_traffic_sign``
    is 0 to 4 (triangle, square, circle, octagon, small triangle).
    """
    if type_traffic_sign not in _EDGES_BY_SIGN_TYPE:
        raise ValueError(f"unknown traffic sign type: {type_traffic_sign}")

    translation = np.asarray(translation_matrix, dtype=np.float64)
    rotation = np.asarray(rotation_matrix, dtype=np.float64)
    scaling = np.asarray(scaling_matrix, dtype=np.float64)
    warping = np.linalg.inv(translation) @ rotation @ scaling @ translation
    warp_image = _warp_perspective(original_image, warping)

    denormalised = denormalise_contour(contour, factor)
    radius = radius_estimation(denormalised)
    untranslated = inverse_transformation_contour(denormalised, translation)
    min_y, min_x, max_x, max_y = extract_min_max(untranslated)
    roi = roi_dimension_definition(min_y, min_x, max_x, max_y, 1.5)
    roi_image = roi_extraction(warp_image, roi)

    edges_number = _EDGES_BY_SIGN_TYPE[type_traffic_sign]
    if type_traffic_sign == 4:
        radius = int(math.ceil(radius / 2.0))

    center_x, center_y = radial_symmetry_detector(roi_image, radius, edges_number)
    center = (
        float(np.float32(center_x + roi.x)),
        float(np.float32(center_y + roi.y)),
    )
    translated = forward_transformation_point(center, translation)
    return normalise_point_fixed_factor(translated, factor)