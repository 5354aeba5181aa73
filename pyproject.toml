[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "osdtool"
version = "0.1.0"
description = "Helpers for SRE work on managed OpenShift clusters: service log templates, egress verification input, STS policy extraction and organization searches"
requires-python = ">=3.10"
dependencies = [
    "semver",
]
keywords = [
    "openshift",
    "sre",
    "servicelog",
    "aws",
    "sts",
    "operations",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["osdtool"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]
