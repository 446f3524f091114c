from setuptools import setup, find_packages

setup(
    name="betlang",
    version="0.3.0",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "scipy>=1.10.0",
        "matplotlib>=3.7.0",
        "plotly>=5.15.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    author="Votre Nom",
    description="Betlang: ternary bet primitive, seeded random contexts, distributions, Markov chains and statistics",
    python_requires=">=3.10",
)
