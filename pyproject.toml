[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "comid"
version = "0.1.0"
description = "Building blocks of the Concise Module Identifier (CoMID) data model with CBOR and JSON serialization"
requires-python = ">=3.10"
keywords = ["comid", "corim", "attestation", "cbor", "cose", "rats", "digests", "x509"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Security",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "cbor2",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["comid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
