#!/usr/bin/env python3

from setuptools import setup, find_packages

setup(
    name="il2c",
    version="0.1.0",
    description="Lowers structured, goto-free IL functions to C source",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"il2c": ["config.json5"]},
    python_requires=">=3.10",
    install_requires=[
        "json5",
    ],
    extras_require={
        "dev": ["pytest", "black", "mypy"],
    },
    entry_points={
        "console_scripts": [
            "il2c=il2c.cli:main",
        ],
    },
)
