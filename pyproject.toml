[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mlconnect"
version = "0.1.0"
description = "Input and output connectors and evaluation measures for machine learning back ends"
requires-python = ">=3.10"
keywords = ["machine learning", "connectors", "bag of words", "tf-idf", "metrics", "auc", "f1", "gini"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
]
dependencies = [
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["mlconnect"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
