"""
Setup file.
"""

import os

from setuptools import find_packages, setup

URL = "https://github.com/jdkpack/jdkpack"
KEYWORDS = "openjdk jdk build configure make packaging sbom release archive"
HERE = os.path.dirname(os.path.abspath(__file__))


if __name__ == "__main__":
    setup(
        name="jdkpack",
        version="0.1.0",
        description="Build orchestration and packaging pipeline for OpenJDK distributions",
        maintainer="jdkpack maintainers",
        keywords=KEYWORDS,
        url=URL,
        python_requires=">=3.10",
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        package_data={"jdkpack": ["templates/*.template"]},
        include_package_data=True,
        install_requires=[
            "psutil",
            "tqdm",
        ],
        extras_require={
            "test": ["pytest"],
        },
        entry_points={
            "console_scripts": [
                "jdkpack=jdkpack.cli:main",
            ],
        },
    )
