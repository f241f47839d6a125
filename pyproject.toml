[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "turmas"
version = "0.1.0"
description = "Class management server with a TCP client for students and teachers and a UDP administration client"
requires-python = ">=3.10"
dependencies = []
keywords = ["education", "classes", "tcp", "udp", "server", "multicast"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
turmas-server = "turmas.server:main"
turmas-class-client = "turmas.class_client:main"
turmas-admin-client = "turmas.admin_client:main"

[tool.hatch.build.targets.wheel]
packages = ["turmas"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
