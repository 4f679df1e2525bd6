from setuptools import setup, find_packages

setup(
    name="simpl-types",
    version="0.1.0",
    description="simpl: Hindley-Milner type inference for a small expression language",
    packages=find_packages(include=["simpl", "simpl.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "hypothesis>=6.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "simpl=simpl.cli:main",
        ],
    },
)
