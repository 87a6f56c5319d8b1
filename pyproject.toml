[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mizzle"
version = "0.1.0"
description = "Parsers and types for serving the Git smart protocol: pkt-lines, commands, fetch, ls-refs and receive-pack requests."
requires-python = ">=3.10"
dependencies = []
keywords = ["git", "pkt-line", "smart-http", "upload-pack", "receive-pack", "protocol-v2"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["mizzle"]

[tool.hatch.build.targets.sdist]
include = ["mizzle", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
files = ["mizzle"]
