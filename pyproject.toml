[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "herdkit"
version = "0.1.0"
description = "Scene graphs, walk meshes, audio mixing and camera helpers for a small 3D herding game"
requires-python = ">=3.10"
keywords = ["game", "scene graph", "walkmesh", "audio mixing", "quaternion", "3d"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
]
dependencies = [
    "numpy",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["herdkit"]

[tool.pytest.ini_options]
addopts = "-ra"
