#!/usr/bin/env python
"""aclengine setup: metadata is read from aclengine/version.py."""
from os import path

from setuptools import find_packages, setup


def get_path(filename):
    return path.join(path.dirname(path.abspath(__file__)), filename)


version = get_path('aclengine/version.py')
with open(version, 'r', encoding='utf-8') as meta:
    # pylint: disable=W0122
    about = {}
    exec(meta.read(), about)

if __name__ == "__main__":
    setup(
        name=about['__title__'],
        version=about['__version__'],
        description=about['__description__'],
        author=about['__author__'],
        author_email=about['__author_email__'],
        license=about['__license__'],
        python_requires=">=3.9",
        packages=find_packages(include=["aclengine", "aclengine.*"]),
        install_requires=[
            "navconfig>=1.7.0",
            "pydantic>=2.0",
            "PyYAML>=6.0",
        ],
        extras_require={
            "test": [
                "pytest>=7.2",
                "pytest-asyncio>=0.21",
            ],
        },
        zip_safe=False,
    )
