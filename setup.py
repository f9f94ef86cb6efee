#!/usr/bin/python3
# Setup file for git-remote-ipfs
# Copyright (C) 2026 git-remote-ipfs contributors
# SPDX-License-Identifier: Apache-2.0 OR GPL-2.0-or-later

import os

from setuptools import setup

with open(os.path.join(os.path.dirname(__file__), "git_remote_ipfs", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__ = "):
            version = ".".join(
                part.strip() for part in line.split("(", 1)[1].split(")")[0].split(",")
            )
            break

tests_require = ["pytest"]


setup(
    name="git-remote-ipfs",
    version=version,
    description="git remote helper for repositories published on IPFS",
    license="Apache-2.0 OR GPL-2.0-or-later",
    python_requires=">=3.10",
    packages=["git_remote_ipfs"],
    package_data={"": ["py.typed"]},
    install_requires=["dulwich>=0.22.0", "urllib3>=2.2.2"],
    extras_require={"test": tests_require},
    entry_points={
        "console_scripts": ["git-remote-ipfs=git_remote_ipfs.cli:_main"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Operating System :: POSIX",
        "Topic :: Software Development :: Version Control",
    ],
)
