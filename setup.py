#!/usr/bin/env python3

from setuptools import setup
import os

directory = os.path.dirname(os.path.realpath(__file__))


if __name__ == "__main__":
    setup(
        name="navexport",
        packages=[
            "navexport",
            "navexport.core",
            "navexport.geombase",
            "navexport.navmesh",
        ],
        python_requires='>3.10.0',
        version="0.1.0",
        license="MIT",
        description="Navigation geometry export for offline navmesh generation",
        long_description=open(os.path.join(
            directory, "README.md"), "r", encoding="utf8").read(),
        long_description_content_type="text/markdown",
        keywords=["navmesh", "recast", "geometry"],
        classifiers=[],
        install_requires=[
            "numpy",
        ],
        extras_require={
            "test": ["pytest"],
        },
        zip_safe=False,
    )
