"""Contour normalisation, regions of interest and rotation-offset estimation.

Float contours are ``numpy`` arrays of shape ``(n, 2)`` and dtype
``float32``; any sequence of ``(x, y)`` pairs is accepted as input.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np

from signshape.mathutils import PolarPoint

THRESH_GRAD_RAD_DET = 0.10
THRESH_BINARY = 0.80

_SLIDING_WINDOW_SIZE = 21.0


@dataclass(frozen=True)
class Roi:
    """An axis-aligned rectangle: top-left corner and size, in pixels."""

    x: int
    y: int
    width: int
    height: int


def _as_array(contour: Iterable[Sequence[float]]) -> np.ndarray:
    return np.asarray(list(contour), dtype=np.float32).reshape(-1, 2)


def find_normalisation_factor(contour: Iterable[Sequence[float]]) -> float:
    """Return the largest absolute coordinate over all points of ``contour``."""
    points = _as_array(contour)
    if len(points) == 0:
        raise ValueError("the contour has no points")
    return float(np.abs(points).max())


def normalise_contour(
    contour: Iterable[Sequence[float]],
) -> tuple[np.ndarray, float]:
    """Scale ``contour`` into the unit square; return it with the factor used."""
    points = _as_array(contour)
    factor = find_normalisation_factor(points)
    scale = np.float32(1.0) / np.float32(factor)
    return (points * scale).astype(np.float32), factor


def normalise_point_fixed_factor(
    point: Sequence[float], factor: float
) -> tuple[float, float]:
    """Divide a single point by ``factor``."""
    scale = np.float32(1.0) / np.float32(factor)
    return (
        float(np.float32(point[0]) * scale),
        float(np.float32(point[1]) * scale),
    )


def normalise_contour_fixed_factor(
    contour: Iterable[Sequence[float]], factor: float
) -> np.ndarray:
    """Divide every point of ``contour`` by ``factor``."""
    points = _as_array(contour).astype(np.float64)
    return (points * (1.0 / factor)).astype(np.float32)


def normalise_all_contours(
    contours: Iterable[Iterable[Sequence[float]]],
) -> tuple[list[np.ndarray], list[float]]:
    """Normalise each contour; return the contours and their factors."""
    normalised: list[np.ndarray] = []
    factors: list[float] = []
    for contour in contours:
        points, factor = normalise_contour(contour)
        normalised.append(points)
        factors.append(factor)
    return normalised, factors


def denormalise_contour(
    contour: Iterable[Sequence[float]], factor: float
) -> np.ndarray:
    """Multiply every point of ``contour`` by ``factor``."""
    points = _as_array(contour).astype(np.float64)
    return (points * factor).astype(np.float32)


def denormalise_all_contours(
    contours: Sequence[Iterable[Sequence[float]]], factors: Sequence[float]
) -> list[np.ndarray]:
    """Denormalise each contour by its own factor."""
    if len(contours) != len(factors):
        raise ValueError("one factor is needed per contour")
    return [
        denormalise_contour(contour, factor)
        for contour, factor in zip(contours, factors)
    ]


def radius_estimation(contour: Iterable[Sequence[float]]) -> int:
    """Return the mean distance of the points to the origin, rounded up."""
    points = _as_array(contour).astype(np.float64)
    if len(points) == 0:
        raise ValueError("the contour has no points")
    radius = float(np.hypot(points[:, 0], points[:, 1]).sum())
    return int(math.ceil(radius / len(points)))


def roi_extraction(original_image: np.ndarray, roi: Roi) -> np.ndarray:
    """Cut ``roi`` out of the image, replicating the border where it overflows."""
    image = np.asarray(original_image)
    rows, cols = image.shape[:2]

    if (
        roi.x > 0
        and roi.x + roi.width < cols
        and roi.y > 0
        and roi.y + roi.height < rows
    ):
        return image[roi.y:roi.y + roi.height, roi.x:roi.x + roi.width]

    within_x, within_y = roi.x, roi.y
    within_width, within_height = roi.width, roi.height
    if roi.x < 0:
        within_x = 0
        within_width -= roi.x
    if roi.y < 0:
        within_y = 0
        within_height -= roi.y
    if within_x + within_width >= cols:
        within_width = cols - within_x
    if within_y + within_height >= rows:
        within_height = rows - within_y
    if within_width <= 0 or within_height <= 0:
        raise ValueError("the region of interest lies outside the image")

    within = image[within_y:within_y + within_height, within_x:within_x + within_width]

    left = abs(roi.x) if roi.x < 0 else 0
    top = abs(roi.y) if roi.y < 0 else 0
    right = roi.width - (cols - roi.x) if roi.x + roi.width >= cols else 0
    bottom = roi.height - (rows - roi.y) if roi.y + roi.height >= rows else 0

    pad = [(top, bottom), (left, right)] + [(0, 0)] * (within.ndim - 2)
    return np.pad(within, pad, mode="edge")


def extract_min_max(
    contour: Iterable[Sequence[float]],
) -> tuple[float, float, float, float]:
    """Return ``(min_y, min_x, max_x, max_y)`` of the contour points."""
    points = _as_array(contour)
    if len(points) == 0:
        raise ValueError("the contour has no points")
    xs = points[:, 0]
    ys = points[:, 1]
    return float(ys.min()), float(xs.min()), float(xs.max()), float(ys.max())


def roi_dimension_definition(
    min_y: float, min_x: float, max_x: float, max_y: float, factor: float
) -> Roi:
    """Return the box around the given extent, enlarged about its centre by ``factor``."""
    return Roi(
        x=int(math.ceil(min_x + (1.0 - factor) * ((max_x - min_x) * 0.5))),
        y=int(math.ceil(min_y + (1.0 - factor) * ((max_y - min_y) * 0.5))),
        width=int(math.ceil(factor * (max_x - min_x))),
        height=int(math.ceil(factor * (max_y - min_y))),
    )


def contour_eucl_to_polar(contour: Iterable[Sequence[float]]) -> list[PolarPoint]:
    """Convert every contour point to polar coordinates."""
    return [
        PolarPoint.from_euclidean(float(x), float(y)) for x, y in _as_array(contour)
    ]


def cmp_pt_vec_pts(pt_ctr: PolarPoint, vec_pts: Iterable[PolarPoint]) -> bool:
    """Return True if ``pt_ctr`` is strictly closer to the origin than every point."""
    return all(pt_ctr.phi < point.phi for point in vec_pts)


def rotation_offset(contour: Iterable[Sequence[float]]) -> float:
    """Return the angle of the first local minimum of the radius, or 0.0.

    Points are ordered by angle and scanned with a sliding window; a point
    is a local minimum when it is closer to the origin than its neighbours
    on both sides of the window.
    """
    polar = sorted(contour_eucl_to_polar(contour))
    half = int(math.ceil(_SLIDING_WINDOW_SIZE / 2.0))
    for idx in range(half, len(polar) - half):
        center = polar[idx]
        previous = polar[idx - half:idx - 1]
        following = polar[idx + 1:idx + half]
        if cmp_pt_vec_pts(center, previous) and cmp_pt_vec_pts(center, following):
            return center.theta
    return 0.0