import os

from setuptools import setup

here = os.path.dirname(os.path.abspath(__file__))

version = {}
with open(os.path.join(here, "geocodec", "_version.py")) as f:
    exec(f.read(), version)

setup(
    name="geocodec",
    version=version["__version__"],
    description="Lossless GeoJSON decoding and encoding built on msgspec",
    license="BSD",
    packages=["geocodec"],
    package_data={"geocodec": ["py.typed"]},
    python_requires=">=3.9",
    install_requires=["msgspec>=0.18"],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["geocodec = geocodec.__main__:main"]},
)
