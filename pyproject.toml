[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tlsfileserve"
version = "0.0.1"
description = "A small multi-threaded HTTPS static file server"
requires-python = ">=3.10"
dependencies = []
keywords = ["https", "tls", "static", "file-server", "http"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
tlsfileserve = "tlsfileserve.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["tlsfileserve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
