[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cs2excel"
version = "0.1.4"
description = "Keep a Counter-Strike 2 inventory spreadsheet up to date with Steam items and market prices."
requires-python = ">=3.10"
keywords = ["cs2", "counter-strike", "steam", "inventory", "xlsx", "spreadsheet", "prices"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Spreadsheet",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "requests>=2.28",
    "beautifulsoup4>=4.11",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
cs2excel = "cs2excel.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["cs2excel"]

[tool.hatch.build.targets.sdist]
include = ["cs2excel", "tests", "pyproject.toml", "README.md"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
