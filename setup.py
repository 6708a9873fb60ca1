from setuptools import setup, find_packages

setup(
    name="stashkeeper",
    version="0.1.0",
    description="Server-side validation and atomic persistence of player inventories",
    python_requires=">=3.11",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "stashkeeper.core": ["schema.sql"],
    },
    install_requires=[
        "flask>=3.0.0",
        "jsonschema>=4.20.0",
        "colorama>=0.4.6",
        "python-dotenv>=1.0.0",
        "itsdangerous>=2.1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "black>=23.12.0",
            "mypy>=1.7.0",
            "pylint>=3.0.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "stashkeeper=stashkeeper.cli.commands:main",
        ]
    },
)
