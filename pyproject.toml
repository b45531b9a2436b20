[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nescore"
version = "0.1.0"
description = "A cycle-stepped NES emulator core: 6502 CPU and picture processing unit"
requires-python = ">=3.10"
dependencies = []
keywords = ["nes", "emulator", "6502", "ppu", "famicom"]
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
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nescore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
