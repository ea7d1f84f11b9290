[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "img2ascii"
version = "0.1.0"
description = "A small web service and library that turn images and short text banners into ASCII art"
requires-python = ">=3.10"
keywords = ["ascii", "ascii-art", "image", "banner", "flask", "web"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]
dependencies = [
    "flask",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
img2ascii = "img2ascii.app:main"

[tool.hatch.build.targets.wheel]
packages = ["img2ascii"]

[tool.pytest.ini_options]
addopts = "-ra"
