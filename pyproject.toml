[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "toyos"
version = "0.1.0"
description = "A FAT16 filesystem driver for disk images, with byte streams over sectors, a keyboard model and a GDT encoder"
requires-python = ">=3.10"
dependencies = []
keywords = ["fat16", "filesystem", "disk-image", "gdt", "ps2", "keyboard"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["toyos"]

[tool.pytest.ini_options]
addopts = "-ra"
