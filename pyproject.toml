[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "codecat"
version = "0.4.0"
description = "Concatenate source code files under the current directory into one text stream for analysis."
requires-python = ">=3.11"
dependencies = []
keywords = ["concatenate", "source code", "codebase", "gitignore", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
codecat = "codecat.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["codecat"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
