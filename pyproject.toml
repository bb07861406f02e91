[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dumakit"
version = "0.1.0"
description = "Diagnostic helpers for a red-zone memory debugger: message formatting, a recursive lock, and map-file based stack traces"
requires-python = ">=3.10"
dependencies = []
keywords = ["debugging", "map file", "stack trace", "diagnostics", "memory debugger"]
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
    "Topic :: Software Development :: Debuggers",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dumakit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
