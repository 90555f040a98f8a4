[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ordermgmt"
version = "0.1.0"
description = "WSGI JSON API for order management: addresses, companies, locations and commodity attributes."
requires-python = ">=3.10"
dependencies = []
keywords = ["wsgi", "json", "api", "order-management", "rest"]
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
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ordermgmt"]

[tool.pytest.ini_options]
addopts = "-ra"
