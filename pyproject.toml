[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "urkinematics"
version = "0.1.0"
description = "Kinematic calibration correction, binary protocol parsing and controller helpers for Universal Robots arms"
requires-python = ">=3.10"
keywords = [
    "robotics",
    "kinematics",
    "denavit-hartenberg",
    "calibration",
    "universal-robots",
    "forward-kinematics",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["urkinematics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
