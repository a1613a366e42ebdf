"""Setup script for the hlapi package."""

from setuptools import find_packages, setup

with open("README.md", "r") as f:
    long_description = f.read()

setup(
    name="hlapi",
    version="0.1.0",
    description="A script-per-endpoint API dispatcher serving Hyperlambda files over HTTP.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["hlapi", "hlapi.*"]),
    include_package_data=True,
    install_requires=[
        "pydantic>=2.0",
        "fastapi",
        "uvicorn",
        "python-multipart",  # Form and multipart payloads
        "lark>=1.1",  # Hyperlambda line grammar
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
            "pre-commit>=3.0.0",
            "black",  # Code formatter
            "isort",  # Import sorting
            "flake8",  # Linting
            "mypy",  # Type checking
            "pytest-cov",  # Coverage reporting
        ],
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21.0",
            "httpx>=0.24.0",
            "pytest-cov",  # Coverage reporting
        ],
    },
    entry_points={
        "console_scripts": [
            "hlapi=hlapi.api.server:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
)
