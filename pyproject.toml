[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "binpeek"
version = "0.1.0"
description = "Identify PE and Mach-O executables and print Mach-O headers, load commands and segments"
requires-python = ">=3.10"
dependencies = []
keywords = ["mach-o", "pe", "executable", "binary", "inspection", "load-commands"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Disassemblers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
binpeek = "binpeek.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["binpeek"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
