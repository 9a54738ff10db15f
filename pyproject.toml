[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "veekay"
version = "0.1.0"
description = "Vector and 4x4 matrix types, PNG chunk utilities, ICC profile parsing and RGB/XYZ colour conversion"
requires-python = ">=3.10"
keywords = ["vector", "matrix", "png", "chunks", "icc", "color", "xyz", "srgb"]
classifiers = [
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Intended Audience :: Developers",
    "Topic :: Multimedia :: Graphics",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["veekay"]

[tool.pytest.ini_options]
addopts = "-ra"
