from setuptools import setup, find_packages

setup(
    name="moddeps",
    version="0.1.0",
    description="Export the dependency graph of installed game mods as a DGML file.",
    author="moddeps contributors",
    license="GPL-3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "rich>=13.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "moddeps=moddeps.modules.cli:main",
        ],
    },
)
