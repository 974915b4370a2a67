"""
Setup script for the DocDB_Ops package.
"""

from setuptools import setup, find_packages

setup(
    name="docdb_ops",
    version="0.1.0",
    description="Document Database Connection Lifecycle Management Package",
    author="Shubham Singh",
    author_email="shubh2014shiv@gmail.com",
    packages=find_packages(exclude=["tests", "tests.*", "usage_examples", "usage_examples.*"]),
    py_modules=["client", "docdb_ops_exceptions"],
    install_requires=[
        "pymongo>=4.0",
        "pydantic>=2.0.0,<3.0.0",
        "pydantic-settings>=2.0.0",
        "pyyaml>=6.0",
        "tenacity>=8.0.0",  # For retry logic
        "python-json-logger>=3.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.12.0",
            "mypy>=1.0.0",
            "flake8>=6.0.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
)
