[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dronegate"
version = "0.1.0"
description = "WebSocket and HTTP gateway relaying drone telemetry and waypoint instructions through Redis pub/sub"
requires-python = ">=3.10"
keywords = ["drone", "gateway", "websocket", "redis", "telemetry", "pubsub"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: AsyncIO",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "aiohttp>=3.9",
    "redis>=5.0.1",
    "sqlalchemy>=2.0",
    "pyyaml>=6.0",
    "python-dotenv>=1.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.4",
    "pytest-asyncio>=0.23",
]

[project.scripts]
dronegate = "dronegate.app:main"

[tool.hatch.build.targets.wheel]
packages = ["dronegate"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
