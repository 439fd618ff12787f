# pylint: disable=missing-module-docstring
# ruff: noqa

from pathlib import Path

from setuptools import find_packages, setup


def read_long_description() -> str:
    """Return README contents for PyPI description."""
    readme_path = Path(__file__).with_name("README.md")
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else "Trend Engine"


setup(
    name="trend-engine",
    version="0.1.0",
    description="Fashion trend scoring and prediction engine",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    python_requires=">=3.11",
    packages=find_packages(include=["trend_engine", "trend_engine.*"]),
    include_package_data=True,
    install_requires=[
        "pandas>=2.0",
        "numpy>=1.24",
        "pydantic>=2.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "trend-pass = trend_engine.cli_entrypoints:run_pass",
            "trend-collect-summary = trend_engine.cli_entrypoints:collect_summary",
            "trend-scheduler = trend_engine.cli_entrypoints:scheduler",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
