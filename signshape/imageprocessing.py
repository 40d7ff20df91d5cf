"""Binary mask clean-up, contour extraction and affine distortion correction.

Integer contours are lists of ``(x, y)`` tuples, in the order in which the
border of a blob is followed. Float contours are ``numpy`` arrays of shape
``(n, 2)`` and dtype ``float32``.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import numpy as np
from scipy import ndimage

Point = tuple[int, int]

# Offsets (dy, dx) of a 4x4 cross structuring element anchored at (2, 2).
_CROSS_OFFSETS = ((0, -2), (0, -1), (0, 0), (0, 1), (-2, 0), (-1, 0), (1, 0))
_MORPH_PAD = 2

# Neighbour directions (dx, dy) in chain-code order, y pointing down.
_DIRECTIONS = ((1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0), (-1, 1), (0, 1), (1, 1))

_FLT_EPSILON = float(np.finfo(np.float32).eps)


@dataclass
class DistortionCorrection:
    """A contour corrected for affine distortion and the matrices that did it."""

    contour: np.ndarray
    translation_matrix: np.ndarray
    rotation_matrix: np.ndarray
    scaling_matrix: np.ndarray


def _as_points(contour: Iterable[Sequence[float]]) -> list[Point]:
    return [(int(x), int(y)) for x, y in contour]


def _check_2d(image: np.ndarray) -> np.ndarray:
    array = np.asarray(image)
    if array.ndim != 2:
        raise ValueError("expected a single-channel image")
    return array


def _morph(image: np.ndarray, reducer, fill: int) -> np.ndarray:
    rows, cols = image.shape
    padded = np.pad(image, _MORPH_PAD, constant_values=fill)
    result = np.full_like(image, fill)
    for dy, dx in _CROSS_OFFSETS:
        window = padded[
            _MORPH_PAD + dy:_MORPH_PAD + dy + rows,
            _MORPH_PAD + dx:_MORPH_PAD + dx + cols,
        ]
        result = reducer(result, window)
    return result


def filter_image(seg_image: np.ndarray) -> np.ndarray:
    """Clean a segmentation mask: dilate, fill blobs, erode, then median-filter.

    Returns an 8-bit mask holding 0 or 255.
    """
    image = _check_2d(seg_image).astype(np.uint8)

    image = _morph(image, np.maximum, 0)
    image = np.where(image > 254, 255, 0).astype(np.uint8)
    image = np.where(ndimage.binary_fill_holes(image > 0), 255, 0).astype(np.uint8)
    image = _morph(image, np.minimum, 255)
    for _ in range(5):
        image = ndimage.median_filter(image, size=5, mode="nearest")
    return image


def _trace_border(foreground: np.ndarray, x0: int, y0: int) -> list[Point]:
    """Follow the outer border starting at the raster-first pixel (x0, y0)."""
    s = 4
    for _ in range(7):
        s = (s - 1) % 8
        dx, dy = _DIRECTIONS[s]
        if foreground[y0 + dy, x0 + dx]:
            break
    else:
        return [(x0 - 1, y0 - 1)]

    x1, y1 = x0 + dx, y0 + dy
    points: list[Point] = []
    x3, y3 = x0, y0
    while True:
        while True:
            s += 1
            dx, dy = _DIRECTIONS[s % 8]
            if foreground[y3 + dy, x3 + dx]:
                break
        s %= 8
        x4, y4 = x3 + dx, y3 + dy
        points.append((x3 - 1, y3 - 1))
        if (x4, y4) == (x0, y0) and (x3, y3) == (x1, y1):
            return points
        x3, y3 = x4, y4
        s = (s + 4) % 8


def find_external_contours(bin_image: np.ndarray) -> list[list[Point]]:
    """Return the outer border of every blob not nested inside another one.

    Every border pixel is listed. Contours come in raster order of their
    first pixel.
    """
    foreground = np.pad(_check_2d(bin_image) != 0, 1)
    filled = ndimage.binary_fill_holes(foreground)
    labels, count = ndimage.label(filled, structure=np.ones((3, 3), dtype=bool))
    if count == 0:
        return []

    flat = labels.ravel()
    nonzero = np.flatnonzero(flat)
    _, first = np.unique(flat[nonzero], return_index=True)
    width = labels.shape[1]
    contours = []
    for start in np.sort(nonzero[first]):
        y0, x0 = divmod(int(start), width)
        contours.append(_trace_border(foreground, x0, y0))
    return contours


def _cross(o: Point, a: Point, b: Point) -> int:
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(contour: Iterable[Sequence[float]]) -> list[Point]:
    """Return the convex hull vertices, collinear points dropped.

    The vertices run opposite to the direction in which blob borders are
    followed, i.e. with a positive shoelace area in image coordinates.
    """
    points = sorted(set(_as_points(contour)))
    if len(points) <= 2:
        return points

    lower: list[Point] = []
    for point in points:
        while len(lower) >= 2 and _cross(lower[-2], lower[-1], point) <= 0:
            lower.pop()
        lower.append(point)
    upper: list[Point] = []
    for point in reversed(points):
        while len(upper) >= 2 and _cross(upper[-2], upper[-1], point) <= 0:
            upper.pop()
        upper.append(point)
    return lower[:-1] + upper[:-1]


def removal_elt(
    contours: Iterable[Iterable[Sequence[float]]],
    size_image: tuple[int, int],
    area_ratio: int = 1500,
    low_aspect_ratio: float = 0.5,
    high_aspect_ratio: float = 1.3,
) -> list[list[Point]]:
    """Drop contours whose bounding box is too small or badly proportioned.

    ``size_image`` is ``(width, height)``. A contour is dropped if its box
    area is below ``width * height // area_ratio`` or its width/height ratio
    lies outside ``[low_aspect_ratio, high_aspect_ratio]``.
    """
    width, height = size_image
    min_area = (width * height) // area_ratio
    kept = []
    for contour in contours:
        points = _as_points(contour)
        if not points:
            continue
        xs = [x for x, _ in points]
        ys = [y for _, y in points]
        box_width = max(xs) - min(xs) + 1
        box_height = max(ys) - min(ys) + 1
        ratio = box_width / box_height
        if box_width * box_height < min_area:
            continue
        if ratio > high_aspect_ratio or ratio < low_aspect_ratio:
            continue
        kept.append(points)
    return kept


def _length(p: Sequence[float], q: Sequence[float]) -> np.float32:
    dx = float(np.float32(q[0]) - np.float32(p[0]))
    dy = float(np.float32(q[1]) - np.float32(p[1]))
    return np.float32(math.sqrt(dx * dx + dy * dy))


def distance(po: Sequence[float], pf: Sequence[float], pc: Sequence[float]) -> float:
    """Return the distance from ``pc`` to the line through ``po`` and ``pf``.

    Computed as a triangle altitude with Heron's formula in single precision;
    rounding can make it NaN for nearly collinear points.
    """
    a = _length(po, pf)
    b = _length(po, pc)
    c = _length(pc, pf)
    s = np.float32((float(a) + float(b) + float(c)) / 2.0)
    with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
        area = np.sqrt(s * (s - a) * (s - b) * (s - c))
        return float(np.float32(2.0) * area / a)


def contours_thresholding(
    hull_contours: Sequence[Iterable[Sequence[float]]],
    contours: Sequence[Iterable[Sequence[float]]],
    dist_threshold: float = 2.0,
) -> list[list[Point]]:
    """Keep only contour points lying within ``dist_threshold`` of a hull edge."""
    final_contours = []
    for hull_points, contour_points in zip(hull_contours, contours, strict=True):
        hull = _as_points(hull_points)
        contour = _as_points(contour_points)
        if not contour:
            final_contours.append([])
            continue
        try:
            hull_idx = hull.index(contour[0])
        except ValueError:
            raise ValueError("the first contour point is not a hull vertex") from None

        current_hull_point = hull[hull_idx]
        hull_idx = (hull_idx - 1) % len(hull)
        next_hull_point = hull[hull_idx]

        good_contour = []
        for point in contour:
            if distance(current_hull_point, next_hull_point, point) < dist_threshold:
                good_contour.append(point)
            if next_hull_point == point:
                current_hull_point = hull[hull_idx]
                hull_idx = (hull_idx - 1) % len(hull)
                next_hull_point = hull[hull_idx]
        final_contours.append(good_contour)
    return final_contours


def contours_extraction(bin_image: np.ndarray) -> list[list[Point]]:
    """Extract plausible sign contours from a binary mask."""
    image = _check_2d(bin_image)
    rows, cols = image.shape
    contours = removal_elt(find_external_contours(image), (cols, rows))
    hulls = [convex_hull(contour) for contour in contours]
    return contours_thresholding(hulls, contours)


def _matrix(matrix: np.ndarray | None) -> np.ndarray:
    if matrix is None:
        return np.eye(3)
    array = np.asarray(matrix, dtype=np.float64)
    if array.shape != (3, 3):
        raise ValueError("transformation matrices must be 3x3")
    return array


def _composite(translation_matrix, rotation_matrix, scaling_matrix) -> np.ndarray:
    return _matrix(rotation_matrix) @ _matrix(scaling_matrix) @ _matrix(translation_matrix)


def _apply(matrix: np.ndarray, contour: Iterable[Sequence[float]]) -> np.ndarray:
    points = np.asarray(list(contour), dtype=np.float64).reshape(-1, 2)
    homogeneous = np.column_stack([points, np.ones(len(points))])
    transformed = homogeneous @ matrix.T
    w = transformed[:, 2]
    scale = np.divide(1.0, w, out=np.ones_like(w), where=w != 0)
    return (transformed[:, :2] * scale[:, None]).astype(np.float32)


def forward_transformation_contour(
    contour: Iterable[Sequence[float]],
    translation_matrix: np.ndarray | None = None,
    rotation_matrix: np.ndarray | None = None,
    scaling_matrix: np.ndarray | None = None,
) -> np.ndarray:
    """Apply rotation * scaling * translation to every contour point."""
    return _apply(
        _composite(translation_matrix, rotation_matrix, scaling_matrix), contour
    )


def forward_transformation_point(
    point: Sequence[float],
    translation_matrix: np.ndarray | None = None,
    rotation_matrix: np.ndarray | None = None,
    scaling_matrix: np.ndarray | None = None,
) -> tuple[float, float]:
    """Apply rotation * scaling * translation to a single point."""
    matrix = _composite(translation_matrix, rotation_matrix, scaling_matrix)
    x, y, _ = matrix @ np.array([float(point[0]), float(point[1]), 1.0])
    return float(np.float32(x)), float(np.float32(y))


def inverse_transformation_contour(
    contour: Iterable[Sequence[float]],
    translation_matrix: np.ndarray | None = None,
    rotation_matrix: np.ndarray | None = None,
    scaling_matrix: np.ndarray | None = None,
) -> np.ndarray:
    """Undo rotation * scaling * translation on every contour point."""
    matrix = np.linalg.inv(
        _composite(translation_matrix, rotation_matrix, scaling_matrix)
    )
    return _apply(matrix, contour)


def _polygon_moments(points: np.ndarray) -> dict[str, float]:
    x = points[:, 0]
    y = points[:, 1]
    xp = np.roll(x, 1)
    yp = np.roll(y, 1)
    dxy = xp * y - x * yp
    xs = xp + x
    ys = yp + y

    a00 = float(dxy.sum())
    if abs(a00) <= _FLT_EPSILON:
        raise ValueError("the contour encloses no area")
    sign = 1.0 if a00 > 0 else -1.0

    m00 = sign * a00 / 2.0
    m10 = sign * float((dxy * xs).sum()) / 6.0
    m01 = sign * float((dxy * ys).sum()) / 6.0
    m20 = sign * float((dxy * (xp * xs + x * x)).sum()) / 12.0
    m11 = sign * float((dxy * (xp * (ys + yp) + x * (ys + y))).sum()) / 24.0
    m02 = sign * float((dxy * (yp * ys + y * y)).sum()) / 12.0

    cx = m10 / m00
    cy = m01 / m00
    return {
        "m00": m00,
        "m10": m10,
        "m01": m01,
        "mu20": m20 - m10 * cx,
        "mu11": m11 - m10 * cy,
        "mu02": m02 - m01 * cy,
    }


def correction_distortion(
    contours: Iterable[Iterable[Sequence[float]]],
) -> list[DistortionCorrection]:
    """Normalise each contour for translation, orientation and anisotropic scale.

    Raises ``ValueError`` for a contour that encloses no area.
    """
    corrections = []
    for contour in contours:
        points = np.asarray(list(contour), dtype=np.float32).reshape(-1, 2)
        moments = _polygon_moments(points.astype(np.float64))
        m00 = moments["m00"]

        xbar = np.float32(moments["m10"] / m00)
        ybar = np.float32(moments["m01"] / m00)
        mu11p = np.float32(moments["mu11"] / m00)
        mu20p = np.float32(moments["mu20"] / m00)
        mu02p = np.float32(moments["mu02"] / m00)

        if mu11p != 0:
            denominator = float(mu20p - mu02p)
            if denominator == 0.0:
                orientation = math.copysign(math.pi / 4.0, float(mu11p))
            else:
                orientation = 0.5 * math.atan(2.0 * float(mu11p) / denominator)
        else:
            orientation = 0.0
        orientation = float(np.float32(orientation))

        covariance = np.array(
            [[mu20p, mu11p], [mu11p, mu02p]], dtype=np.float32
        ).astype(np.float64)
        ev1, ev0 = np.linalg.eigvalsh(covariance)
        ev0 = float(np.float32(ev0))
        ev1 = float(np.float32(ev1))

        cos_o = math.cos(orientation)
        sin_o = math.sin(orientation)
        rotation = np.eye(3, dtype=np.float32)
        rotation[0, 0] = cos_o
        rotation[0, 1] = -sin_o
        rotation[1, 0] = sin_o
        rotation[1, 1] = cos_o

        with np.errstate(divide="ignore", invalid="ignore"):
            common = (ev0 * ev1) ** 0.25 if ev0 * ev1 >= 0 else math.nan
            root0 = math.sqrt(ev0) if ev0 >= 0 else math.nan
            root1 = math.sqrt(ev1) if ev1 >= 0 else math.nan
            first = np.float64(common) / np.float64(root0)
            second = np.float64(common) / np.float64(root1)
        scaling = np.eye(3, dtype=np.float32)
        if moments["mu20"] > moments["mu02"]:
            scaling[0, 0] = first
            scaling[1, 1] = second
        else:
            scaling[0, 0] = second
            scaling[1, 1] = first

        translation = np.eye(3, dtype=np.float32)
        translation[0, 2] = -xbar
        translation[1, 2] = -ybar

        corrected = forward_transformation_contour(
            points, translation, rotation, scaling
        )
        corrections.append(
            DistortionCorrection(corrected, translation, rotation, scaling)
        )
    return corrections