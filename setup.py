"""Setup script for the growlink package."""

from setuptools import find_packages, setup

setup(
    name="growlink",
    version="0.1.0",
    description="Growlink plant monitoring and control client for ThingSpeak channels",
    author="Peter Butler",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.9",
    install_requires=[
        "pyyaml",
        "python-dotenv",
        "aiohttp",
        "rich",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "growlink-monitor=growlink.display:main",
        ],
    },
)
