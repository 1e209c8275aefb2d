from pathlib import Path
from setuptools import setup, find_packages

README = (Path(__file__).parent / "README.md").read_text(encoding="utf-8")

setup(
    name="baba-client",
    version="0.1.0",
    description="Desktop client for a server-hosted Baba Is You game",
    long_description=README,
    long_description_content_type="text/markdown",
    packages=find_packages(include=("babaclient", "babaclient.*")),
    python_requires=">=3.9",
    install_requires=[
        "pygame>=2.5.0",
        "websockets>=13.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "baba-client=babaclient.cli:main",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Environment :: X11 Applications",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Games/Entertainment :: Puzzle Games",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
