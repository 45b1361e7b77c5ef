#!/usr/bin/env python3
from setuptools import setup

setup(
    name="heat-ftcs",
    version="0.1.0",
    description="Explicit FTCS solver for the 1D heat equation, with CLI tools",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.9",
    py_modules=[
        "ftcs",
        "stability",
        "convergence",
        "npz_io",
        "plots",
        "plot_from_npz",
        "simulation",
        "heat",
    ],
    install_requires=[
        "numpy",
        "scipy",
        "matplotlib",
        "tabulate",
        "tqdm",
        "questionary",
        "termplotlib",
        "pyyaml",
    ],
    entry_points={
        "console_scripts": [
            "heat-ftcs=heat:main",
            "heat-ftcs-sim=simulation:main",
            "heat-ftcs-converge=convergence:main",
            "heat-ftcs-plot=plot_from_npz:main",
        ]
    },
    extras_require={
        "test": [
            "pytest",
        ],
        "docs": [
            "sphinx>=3.0",
            "sphinx-rtd-theme",
        ],
    },
)
