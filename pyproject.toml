[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "signshape"
version = "0.1.0"
description = "Colour segmentation, contour extraction and radial symmetry centre detection for traffic signs"
requires-python = ">=3.10"
keywords = ["traffic sign", "segmentation", "contour", "radial symmetry", "ihls", "computer vision"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Image Recognition",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["signshape"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
