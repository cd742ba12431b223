[build-system]
requires = ["setuptools>=61.0"]
build-backend = "setuptools.build_meta"

[project]
name = "wirelessbridge"
version = "1.0.0"
description = "Component framework and building blocks for an MQTT bridge serving wireless device nodes"
requires-python = ">=3.10"
dependencies = []
keywords = ["mqtt", "home-automation", "bridge", "wireless", "iot", "components"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Home Automation",
    "Topic :: Communications",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.setuptools.packages.find]
include = ["wirelessbridge*"]

[tool.pytest.ini_options]
addopts = "-ra"
