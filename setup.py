"""
Setup configuration for tribuanalyzer package.
"""

from setuptools import setup, find_packages

setup(
    name="tribuanalyzer",
    version="1.0.0",
    description="Meta Ads performance diagnostics with an AI media-buyer advisor",
    packages=find_packages(include=["tribuanalyzer", "tribuanalyzer.*"]),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.5",
        "pydantic-ai>=1.0",
        "logfire>=3.0",
        "python-dotenv>=1.0",
        "click>=8.1",
        "rich>=13.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "tribuanalyzer=tribuanalyzer.cli.main:cli",
        ],
    },
)
