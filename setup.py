"""Setup configuration for u64-remote."""

from setuptools import setup, find_packages

setup(
    name="u64-remote",
    version="0.1.0",
    description="Discover a C64U / Ultimate 64 on the local network and run programs on it",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0,<8.4",
        "zeroconf>=0.131.0",
        "psutil>=5.9.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "u64-remote=u64_remote.cli:main",
        ],
    },
)
