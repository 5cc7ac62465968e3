[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "metawatch"
version = "0.1.0"
description = "Inspect, back up, restore and repair the key-value metadata of a vector database instance"
requires-python = ">=3.10"
dependencies = []
keywords = ["etcd", "metadata", "backup", "restore", "segments", "diagnostics"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: System :: Archiving :: Backup",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["metawatch"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
