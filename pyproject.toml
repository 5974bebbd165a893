[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ndsbanner"
version = "0.1.0"
description = "Read, edit and write Nintendo DS banner.bin files: icons, titles, versions and DSi animations"
requires-python = ">=3.10"
dependencies = ["pillow"]
keywords = ["nds", "nintendo-ds", "dsi", "banner", "icon", "romhacking"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Editors",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
ndsbanner = "ndsbanner.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["ndsbanner"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
