#!/usr/bin/env python3
"""
Setup script for the lpalgo package.

This setup.py provides a traditional installation method for the
lpalgo community detection library.
"""

from setuptools import setup, find_packages

# Read the README file
def read_readme():
    """Read README.md for long description."""
    try:
        with open("README.md", "r", encoding="utf-8") as fh:
            return fh.read()
    except FileNotFoundError:
        return "Community detection on weighted undirected graphs"

# Read version from __init__.py
def get_version():
    """Extract version from src/lpalgo/__init__.py."""
    version = {}
    try:
        with open("src/lpalgo/__init__.py", "r") as f:
            for line in f:
                if line.startswith("__version__"):
                    exec(line, version)
                    break
        return version.get("__version__", "0.1.0")
    except FileNotFoundError:
        return "0.1.0"

setup(
    name="lpalgo",
    version=get_version(),
    description="Louvain, Girvan-Newman, label propagation and clique percolation community detection",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Information Analysis",
        "Topic :: Scientific/Engineering :: Mathematics",
    ],
    python_requires=">=3.9",
    install_requires=[
        "networkit>=11.0",
        "polars>=1.0",
        "numpy>=1.24.0",
        "scikit-learn>=1.2",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.1.0",
            "black>=23.0",
            "mypy>=1.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
