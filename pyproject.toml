[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sproutnet"
version = "0.1.0"
description = "Stochastic delivery forecasting, queueing disciplines and datagram framing for a forecast-driven transport"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["networking", "congestion-control", "forecast", "codel", "aqm", "fragmentation"]
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
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sproutnet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
