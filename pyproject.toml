[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ghactivity"
version = "0.1.0"
description = "Show a GitHub user's recent public activity from the command line"
requires-python = ">=3.10"
dependencies = []
keywords = ["github", "activity", "events", "cli", "git"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Version Control :: Git",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
github-activity = "ghactivity.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ghactivity"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
