# flake8: noqa
from setuptools import setup, find_packages
from pathlib import Path

long_description = (Path(__file__).parent / "README.md").read_text()

exec(open("alstructure/version.py").read())

setup(
    name="alstructure",
    version=__version__,
    description="Estimating population structure under the admixture model with latent subspace estimation and alternating least squares",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "scipy>=1.5",
        "pandas",
        "xarray",
        "dask[array]>=2021.11.2",
        "tqdm",
        "structlog",
    ],
    extras_require={"test": ["pytest"]},
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Intended Audience :: Science/Research",
    ],
    long_description=long_description,
    long_description_content_type="text/markdown",
)
