[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xettacast"
version = "0.1.0"
description = "YAML settings, hotkey parsing, texture atlas packing, font glyph rasterisation and 2D draw-list building for an overlay launcher"
requires-python = ">=3.10"
keywords = ["texture-atlas", "bin-packing", "font", "glyph", "renderer", "config", "yaml", "hotkey"]
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
    "Topic :: Multimedia :: Graphics",
]
dependencies = [
    "pyyaml>=6.0",
    "numpy>=1.23",
    "pillow>=9.2",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["xettacast"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
