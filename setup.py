"""
Setup script for AnyBase

Install:
    pip install -e .

With test dependencies:
    pip install -e .[test]
"""

from setuptools import setup, find_packages

setup(
    name="anybase",
    version="1.0.0",
    description="Provider-agnostic CRUD and schema layer for SQL Server, MySQL and SQLite",
    author="AnyBase Contributors",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"anybase": ["templates.yaml"]},
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "pyyaml>=6.0",
        "click>=8.0.0",
        "rich>=13.0.0",
        "mysql-connector-python>=8.0.0",
        "pymssql>=2.2.0",
        "pyodbc>=5.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "anybase=anybase.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries",
    ],
)
