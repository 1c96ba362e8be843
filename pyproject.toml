[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gois"
version = "1.0.0"
description = "WHOIS domain lookup tool: single queries, batch files, pattern-generated domains and availability checks"
requires-python = ">=3.10"
dependencies = []
keywords = ["whois", "domain", "dns", "registrar", "availability", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: Name Service (DNS)",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gois = "gois.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gois"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
