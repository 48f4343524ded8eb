[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mipscache"
version = "0.1.0"
description = "Single-cycle MIPS emulator with fully associative and direct-mapped cache models"
requires-python = ">=3.10"
dependencies = []
keywords = ["mips", "emulator", "cache", "simulator", "computer-architecture"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
mipscache = "mipscache.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["mipscache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
