[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xvtools"
version = "0.1.0"
description = "Small Unix-style text and file tools, a shell-language parser, a first-fit heap model and a simple file-system image builder"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "unix",
    "utilities",
    "grep",
    "wc",
    "shell",
    "parser",
    "mkfs",
    "filesystem-image",
    "malloc",
    "virtio",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
xv-cat = "xvtools.cat:main"
xv-echo = "xvtools.echo:main"
xv-grep = "xvtools.grep:main"
xv-wc = "xvtools.wc:main"
xv-xargs = "xvtools.xargs:main"
xv-primes = "xvtools.primes:main"
xv-pingpong = "xvtools.ipc:main"
xv-find = "xvtools.find:main"
xv-ls = "xvtools.ls:main"
xv-stressfs = "xvtools.stressfs:main"
xv-mkfs = "xvtools.mkfs:main"
xv-grind = "xvtools.grind:main"

[tool.hatch.build.targets.wheel]
packages = ["xvtools"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
