[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "employeesvc"
version = "1.0.0"
description = "HTTP service for creating, reading, updating and deleting employee records, with optional bearer-token protection."
requires-python = ">=3.10"
keywords = ["employees", "crud", "rest", "http", "oauth", "jwt", "flask", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
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
    "flask",
    "pyjwt",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
employeesvc = "employeesvc.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["employeesvc"]

[tool.pytest.ini_options]
addopts = "-ra"
