[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshcheck"
version = "0.1.0"
description = "Helpers for end-to-end testing of service mesh deployments: version comparison, retries, shell commands, templates, HTTP request options and Prometheus queries."
requires-python = ">=3.10"
keywords = ["testing", "service-mesh", "openshift", "e2e", "prometheus", "retry", "templates"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
]
dependencies = [
    "pyyaml>=6.0",
    "jinja2>=3.1",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["meshcheck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
