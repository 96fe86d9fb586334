[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luastd"
version = "0.1.0"
description = "Core runtime helpers and standard libraries of a small scripting language, in pure Python"
requires-python = ">=3.10"
dependencies = []
keywords = ["lua", "lexer", "pattern-matching", "bytecode", "standard-library"]
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
    "Topic :: Software Development :: Interpreters",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["luastd"]

[tool.pytest.ini_options]
addopts = "-ra"
