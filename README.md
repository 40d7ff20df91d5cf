# signshape

Building blocks for finding traffic signs in colour images: colour space
conversion, colour segmentation, binary mask clean-up, contour extraction,
contour normalisation and a radial symmetry detector that estimates the centre
of a sign.

Images are NumPy arrays of shape `(rows, cols, 3)` and dtype `uint8`, with the
channels in blue, green, red order. Integer contours are lists of `(x, y)`
tuples; float contours are `(n, 2)` `float32` arrays.

## Installation

```
pip install .
```

To run the tests, install the `test` extra and run `pytest`:

```
pip install .[test]
pytest
```

## Modules

- `signshape.colour`
  - `rgb_to_log_rb(bgr_image)` returns the `float32` planes `log(R/G)` and
    `log(B/G)`. A zero green value counts as one.
  - `convert_rgb_to_ihls(bgr_image)` returns an 8-bit image whose channels are
    saturation, luminance and normalised hue. Grey pixels get a hue of zero.
  - The per-pixel helpers are `retrieve_theta`, `retrieve_normalised_hue`,
    `retrieve_luminance` and `retrieve_saturation`.
- `signshape.segmentation`
  - `seg_log_chromatic(log_image)` thresholds the log-chromatic pair into a
    0/255 mask.
  - `seg_norm_hue(ihls_image, colour, hue_max, hue_min, sat_min)` thresholds an
    IHLS image. `colour` is a `SignColour`: `RED`, `BLUE`, or `CUSTOM_RED`.
    `CUSTOM_RED` uses the given thresholds and falls back to the red defaults
    when any of them lies outside 0..255.
- `signshape.imageprocessing`
  - `filter_image` dilates a mask, fills its blobs, erodes it and
    median-filters it.
  - `find_external_contours`, `convex_hull`, `removal_elt`,
    `contours_thresholding` and `distance` are the pieces that
    `contours_extraction` combines to turn a mask into candidate contours.
  - `correction_distortion(contours)` returns one `DistortionCorrection` per
    contour: the corrected contour together with its translation, rotation and
    scaling matrices. A contour that encloses no area raises `ValueError`.
  - `forward_transformation_contour`, `forward_transformation_point` and
    `inverse_transformation_contour` apply, or undo, `rotation @ scaling @
    translation`. A matrix that is left out counts as the identity.
- `signshape.contour`
  - `normalise_contour`, `normalise_all_contours`, `normalise_contour_fixed_factor`
    and `normalise_point_fixed_factor` scale contours by their largest absolute
    coordinate, so the contour fits inside the unit square.
    `denormalise_contour` and `denormalise_all_contours` scale them back.
  - `radius_estimation`, `extract_min_max` and `roi_dimension_definition`
    measure a contour. `roi_extraction(image, roi)` cuts a `Roi` out of an
    image and replicates the border wherever the region runs past the edge.
  - `rotation_offset(contour)` returns the angle of the first local minimum of
    the radius, or `0.0` when there is none. The helpers behind it are
    `contour_eucl_to_polar` and `cmp_pt_vec_pts`.
- `signshape.symmetry`
  - `radial_symmetry_detector(roi_image, radius, edges_number)` returns the
    estimated `(x, y)` centre of a regular polygon in the image.
  - `mass_center_discovery(...)` warps the image to undo a contour's
    distortion, searches a region around the contour and returns the centre in
    the contour's normalised frame. Sign types 0–4 stand for triangle, square,
    circle, octagon and small triangle.
  - The detector's stages are also exposed: `rgb_to_float_gray`,
    `gradient_thresh`, `orientations_from_gradient`, `round_matrix` and
    `mass_center_by_voting`. Note that `rgb_to_float_gray` weights the first
    channel as red.
- `signshape.mathutils` holds `get_maximum`, `get_minimum` and the
  `PolarPoint` type. Polar points are ordered by angle.
- `signshape.rng` provides `Random`, a seeded generator with `uniform`,
  `uniform_between`, `uniform_int`, `gaussian` and `exponential`. Seeds 0 and 1
  give the same sequence.
- `signshape.timer` provides `Timer`, a context manager. It prints
  `=== START: name` on entry and the elapsed milliseconds on exit, and it
  stores that figure in `elapsed_ms`.

## Example

```python
import numpy as np
from signshape.colour import convert_rgb_to_ihls, rgb_to_log_rb
from signshape.segmentation import SignColour, seg_log_chromatic, seg_norm_hue
from signshape.imageprocessing import filter_image, contours_extraction, correction_distortion
from signshape.contour import normalise_all_contours, rotation_offset

image = np.zeros((200, 200, 3), dtype=np.uint8)
image[50:150, 50:150] = (30, 30, 220)   # a red square, BGR order

hue_mask = seg_norm_hue(convert_rgb_to_ihls(image), SignColour.RED)
log_mask = seg_log_chromatic(rgb_to_log_rb(image))
mask = filter_image(hue_mask | log_mask)

contours = contours_extraction(mask)
corrections = correction_distortion(contours)
normalised, factors = normalise_all_contours(c.contour for c in corrections)
for contour, factor in zip(normalised, factors):
    print(factor, rotation_offset(contour))
```

To time a block:

```python
from signshape.timer import Timer

with Timer("segmentation") as timer:
    ...
print(timer.elapsed_ms)
```

## What it does not do

- It is a library only and has no command-line program.
- It does not read, write or display image files. You load the images into
  NumPy arrays yourself.
- It finds and normalises candidate contours and estimates their centres. It
  does not fit a shape model to a contour, and it does not decide which kind of
  sign a contour is.