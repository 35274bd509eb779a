from setuptools import setup, find_packages
import re

# Read version from stipendcalc/__init__.py
with open('stipendcalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='stipend-calc',
    version=version,
    packages=find_packages(include=['stipendcalc', 'stipendcalc.*']),
    package_data={
        'stipendcalc': ['rates/*.yaml'],
    },
    install_requires=[
        'PyPDF2>=3.0.0',
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
    ],
    extras_require={
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'stipend-calc=stipendcalc.cli.__main__:main',
            'stipend-calc-mcp=stipendcalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Travel nursing offer comparison and stipend tax tools.',
    python_requires='>=3.10',
)
