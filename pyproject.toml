[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kernkit"
version = "0.1.0"
description = "Models of a small Unix-like kernel: ctype and string routines, paging and allocator simulations, a.out headers, signal sets, tty queues and a boot image builder"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "paging", "allocator", "a.out", "boot image", "termios", "minix"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Operating System Kernels :: Linux",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
kernkit-build = "kernkit.imagebuild:main"

[tool.hatch.build.targets.wheel]
packages = ["kernkit"]

[tool.pytest.ini_options]
addopts = "-ra"
