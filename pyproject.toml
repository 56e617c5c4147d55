[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kvpatterns"
version = "0.1.0"
description = "Stability and concurrency patterns plus a small persistent key-value HTTP service"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "key-value",
    "circuit-breaker",
    "debounce",
    "throttle",
    "retry",
    "future",
    "sharding",
    "transaction-log",
    "wsgi",
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kvpatterns-hello = "kvpatterns.hello:main"
kvpatterns-service = "kvpatterns.service:main"

[tool.hatch.build.targets.wheel]
packages = ["kvpatterns"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
