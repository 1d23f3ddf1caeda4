[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "conjurert"
version = "2.0.0"
description = "Runtime support for Conjure services: codecs, structured errors, JSON handlers and client error decoding."
requires-python = ">=3.10"
dependencies = []
keywords = ["conjure", "rpc", "errors", "codecs", "http", "json"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["conjurert"]

[tool.pytest.ini_options]
addopts = "-ra"
