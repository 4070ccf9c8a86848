[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mpcircuit"
version = "0.1.0"
description = "Boolean circuits over pluggable execution backends, Bristol circuit files, AES-128-CTR helpers and byte channels for two-party computation"
requires-python = ">=3.10"
keywords = ["circuits", "mpc", "bristol", "aes", "secure-computation", "two-party"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Security :: Cryptography",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mpcircuit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
