"""Setup file for pbfgen."""
from setuptools import find_packages, setup

setup(
    name="pbfgen",
    version="0.1.0",
    description="Generate Python readers and writers for protobuf message schemas",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "protobuf>=5.26",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pbfgen = pbfgen.cli.main:main",
        ],
    },
)
