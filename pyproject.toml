[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "healthledger"
version = "0.1.0"
description = "In-memory healthcare record contracts: entity access control and patient allergy management and tracking."
requires-python = ">=3.10"
dependencies = []
keywords = ["healthcare", "allergy", "access-control", "medical-records", "ledger"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Healthcare Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Medical Science Apps.",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["healthledger"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
