[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pulsarkit"
version = "0.1.0"
description = "Pulsar and transient data tools: SIGPROC filterbank I/O, in-memory sub-integrations and numeric kernels"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["pulsar", "radio astronomy", "filterbank", "sigproc", "transient", "dispersion"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Astronomy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pulsarkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
