[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sitewatch"
version = "0.1.0"
description = "Multi-object tracking and staged detection pipelines for worksite safety monitoring"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "tracking",
    "bytetrack",
    "kalman-filter",
    "object-detection",
    "linear-assignment",
    "safety-monitoring",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sitewatch"]

[tool.hatch.build.targets.sdist]
include = ["sitewatch", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"
