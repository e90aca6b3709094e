[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinyunix"
version = "0.1.0"
description = "Models of the parts of a small x86 Unix-like teaching kernel and its user library"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "kernel",
    "operating-system",
    "paging",
    "x86",
    "shell",
    "allocator",
    "teaching",
    "simulation",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
    "Topic :: System :: Operating System Kernels",
]

[project.optional-dependencies]
test = [
    "pytest",
    "hypothesis",
]

[project.scripts]
tinyunix-wc = "tinyunix.wc:main"

[tool.hatch.build.targets.wheel]
packages = ["tinyunix"]

[tool.hatch.build.targets.sdist]
include = ["tinyunix", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
