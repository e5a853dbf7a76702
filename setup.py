"""
Setup script for the Figma Relay package.

This package provides the authenticated relay endpoint that fetches Figma
design files, selects top-level screens and enriches them with node detail.
"""
from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="figma-relay",
    version="1.0.0",
    author="Figma Relay Team",
    description="Authenticated Figma screen enrichment relay for AWS Lambda",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*", "lambda", "lambda.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Internet :: WWW/HTTP :: Dynamic Content",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.11",
    install_requires=[
        # AWS SDK (CloudWatch metrics)
        "boto3>=1.28.85",
        "botocore>=1.31.85",

        # HTTP client
        "requests>=2.31.0",
    ],
    extras_require={
        "dev": [
            # Testing
            "pytest>=7.4.3",
            "pytest-cov>=4.1.0",

            # Code quality
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.1",

            # Type stubs
            "boto3-stubs[cloudwatch]>=1.28.85",
            "types-requests>=2.31.0",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
