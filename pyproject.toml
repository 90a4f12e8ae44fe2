[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pcinames"
version = "3.8.0"
description = "PCI ID to name resolution from pci.ids lists, DNS and HWDB lookups, with PCI device and access models"
requires-python = ">=3.10"
keywords = ["pci", "pci.ids", "hardware", "lspci", "virtio"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Hardware",
]
dependencies = [
    "dnspython",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pcinames"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
