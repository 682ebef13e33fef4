from setuptools import setup, find_packages

setup(
    name="visionspend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "pandas",
        "numpy",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-dependency",
        ],
    },
    description="Schema-less ingestion, merging and querying of transaction exports",
    python_requires=">=3.8",
)
