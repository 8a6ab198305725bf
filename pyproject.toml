[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fatkit"
version = "0.1.0"
description = "Read, write and initialise FAT16 disk images, with a small text shell on top"
requires-python = ">=3.10"
dependencies = []
keywords = ["fat16", "filesystem", "disk image", "shell"]
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
    "Topic :: System :: Filesystems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
initfat16 = "fatkit.initfat16:main"

[tool.hatch.build.targets.wheel]
packages = ["fatkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
