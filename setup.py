# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

import os
import re

from setuptools import find_packages, setup


def read_version():
    path = os.path.join(os.path.dirname(__file__), "lwgraph", "__init__.py")
    with open(path) as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.MULTILINE)
    if not match:
        raise RuntimeError("Unable to find __version__ in lwgraph/__init__.py")
    return match.group(1)


setup(
    name="lwgraph",
    version=read_version(),
    description="Lightweight evaluation of frozen feed-forward and recurrent networks",
    license="Apache-2.0",
    packages=find_packages(include=["lwgraph", "lwgraph.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy>=1.21",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "lwgraph=lwgraph.cli:main",
        ],
    },
)
