"""Setup configuration for pip-frontend."""

from setuptools import setup, find_packages

setup(
    name="pip-frontend",
    version="0.1.0",
    description="Locate and drive pip for any Python interpreter",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"pip_frontend": ["scripts/*.py"]},
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.31.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "pip-frontend=pip_frontend.cli:main",
        ],
    },
)
