[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "freelib"
version = "0.1.0"
description = "Catalogue e-book libraries (INPX collections, FB2 and EPUB books) in an SQLite database"
requires-python = ">=3.10"
dependencies = []
keywords = ["ebooks", "fb2", "epub", "inpx", "library", "catalog", "sqlite"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database :: Front-Ends",
    "Topic :: Text Processing :: Indexing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["freelib"]

[tool.pytest.ini_options]
addopts = "-ra"
