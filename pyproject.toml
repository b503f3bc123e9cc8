[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "evento-client"
version = "0.1.0"
description = "Client-side core for campus events: JSON entities, display conversion, toast messages, account sessions and a background task executor."
requires-python = ">=3.10"
dependencies = []
keywords = ["events", "scheduling", "client", "toast", "asyncio"]
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
    "Topic :: Office/Business :: Scheduling",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["evento_client"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
