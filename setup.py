"""setuptools configuration for TimesUp.

Install for development:
    pip install -e ".[test]"
    timesup --start 60
"""

from setuptools import setup, find_packages

setup(
    name="TimesUp",
    version="0.1.0",
    packages=find_packages(include=["timesup", "timesup.*"]),
    python_requires=">=3.10",
    install_requires=["PyQt6"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["timesup = timesup.__main__:main"],
    },
)
