"""Setup file for development installation."""

from setuptools import setup, find_namespace_packages

setup(
    name="trip-assistant",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["trip_assistant*"]),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "pydantic-settings>=2.0",
        "structlog>=23.1",
        "prometheus-client>=0.17",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
)
