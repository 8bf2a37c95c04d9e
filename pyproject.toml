[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "admincore"
version = "0.1.0"
description = "Building blocks for admin back ends: tenant-scoped caches, queues and locks, a runnable manager, search-condition building and call logging."
requires-python = ">=3.10"
dependencies = [
    "redis",
]
keywords = [
    "admin",
    "cache",
    "queue",
    "multi-tenant",
    "redis",
    "search",
    "logging",
]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["admincore"]

[tool.hatch.build.targets.sdist]
include = [
    "admincore",
    "tests",
]

[tool.pytest.ini_options]
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
