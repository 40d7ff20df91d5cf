"""Threshold segmentation of log-chromatic and IHLS images."""

from __future__ import annotations

import enum
from collections.abc import Sequence

import numpy as np

# Log-chromatic thresholds for red signs.
MINLOGRG = 0.5
MAXLOGRG = 2.1
# Log-chromatic thresholds for blue signs.
MINLOGBG = -0.9
MAXLOGBG = 0.8

# IHLS thresholds for red signs.
R_HUE_MAX = 15
R_HUE_MIN = 240
R_SAT_MIN = 25
# IHLS thresholds for blue signs.
B_HUE_MAX = 163
B_HUE_MIN = 134
B_SAT_MIN = 39


class SignColour(enum.IntEnum):
    """Which sign colour the hue segmentation looks for."""

    RED = 0
    BLUE = 1
    CUSTOM_RED = 2


def seg_log_chromatic(log_image: Sequence[np.ndarray]) -> np.ndarray:
    """Segment a ``(log(R/G), log(B/G))`` pair into an 8-bit mask (0 or 255)."""
    if len(log_image) < 2:
        raise ValueError("expected two log-chromatic channels")
    for channel in log_image:
        if np.asarray(channel).dtype != np.float32:
            raise ValueError("log-chromatic channels must be float32")
    log_r = np.asarray(log_image[0]).astype(np.float64)
    log_b = np.asarray(log_image[1]).astype(np.float64)
    if log_r.shape != log_b.shape:
        raise ValueError("log-chromatic channels must have the same shape")

    cond_r = (log_r > MINLOGRG) & (log_r < MAXLOGRG)
    cond_b = (log_b > MINLOGBG) & (log_b < MAXLOGBG)
    return np.where(cond_r & cond_b, 255, 0).astype(np.uint8)


def seg_norm_hue(
    ihls_image: np.ndarray,
    colour: SignColour | int = SignColour.RED,
    hue_max: int = R_HUE_MAX,
    hue_min: int = R_HUE_MIN,
    sat_min: int = R_SAT_MIN,
) -> np.ndarray:
    """Segment an IHLS image on normalised hue and saturation.

    ``RED`` and ``BLUE`` use the built-in thresholds. ``CUSTOM_RED`` uses the
    given thresholds with the red rule, falling back to the red defaults if
    any of them lies outside [0, 255]. Returns an 8-bit mask (0 or 255).
    """
    if colour == SignColour.CUSTOM_RED:
        if any(not 0 <= value <= 255 for value in (hue_max, hue_min, sat_min)):
            hue_min, hue_max, sat_min = R_HUE_MIN, R_HUE_MAX, R_SAT_MIN
    elif colour == SignColour.BLUE:
        hue_min, hue_max, sat_min = B_HUE_MIN, B_HUE_MAX, B_SAT_MIN
    else:
        hue_min, hue_max, sat_min = R_HUE_MIN, R_HUE_MAX, R_SAT_MIN

    image = np.asarray(ihls_image)
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError("expected an image with three channels")

    saturation = image[..., 0].astype(np.int64)
    hue = image[..., 2].astype(np.int64)

    if colour == SignColour.BLUE:
        mask = (hue < hue_max) & (hue > hue_min) & (saturation > sat_min)
    else:
        mask = ((hue < hue_max) | (hue > hue_min)) & (saturation > sat_min)
    return np.where(mask, 255, 0).astype(np.uint8)