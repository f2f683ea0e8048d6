[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "blehost"
version = "0.1.0"
description = "Bluetooth Low Energy HCI building blocks: a UART transport, packet framing, command parameter encoding and response decoding"
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["bluetooth", "ble", "hci", "uart", "serial"]
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
    "Topic :: Communications",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.setuptools.packages.find]
include = ["blehost*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
