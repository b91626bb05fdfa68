[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nmcprecip"
version = "0.1.0"
description = "Chemical equilibrium, particle kinetics and quadrature moment source terms for NMC hydroxide co-precipitation"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = [
    "precipitation",
    "co-precipitation",
    "chemical equilibrium",
    "activity coefficients",
    "population balance",
    "quadrature method of moments",
    "micromixing",
    "NMC",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Chemistry",
    "Topic :: Scientific/Engineering :: Physics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["nmcprecip"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
