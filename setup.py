from setuptools import setup, find_packages
import re

# Read version from vnpit/__init__.py
with open('vnpit/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='vnpit',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'vnpit': ['tax-rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'vn-pit=vnpit.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Vietnamese personal income tax: GROSS/NET conversion and law-transition planning.',
    python_requires='>=3.10',
)
