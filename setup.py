"""Python setup.py for labelcamp_api package"""
from setuptools import find_packages, setup

_long_description = ""

try:
    with open('README.md', 'rt') as f:
        _long_description = f.read()
except FileNotFoundError:
    pass

setup(
    name="labelcamp_api",
    version='0.1.0',
    description="Python request bindings to the Labelcamp JSON:API",
    long_description=_long_description,
    long_description_content_type="text/markdown",
    packages=find_packages('src', exclude=["tests", ".github"]),
    package_dir={"": 'src'},
    python_requires='>=3.9',
    install_requires=[
        'requests',
        'msgspec',
        'pandas',
        'cachetools',
    ],
    extras_require={"test": ['pytest', 'keyring']},
)
