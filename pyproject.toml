[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "libos"
version = "0.1.0"
description = "Support routines for small embedded operating systems: printf-style formatting, string parsing, bump allocation, a line editor, trap dumps, TLB sizing and device-tree address translation"
requires-python = ">=3.10"
dependencies = []
keywords = ["embedded", "printf", "readline", "device-tree", "tlb", "booke", "allocator"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["libos"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
