#!/usr/bin/env python
# -*- coding: utf-8 -*-

from setuptools import find_packages, setup


# Load the __version__ variable
exec(open('deferral/__version__.py').read())


with open('README.rst') as readme_file:
    long_description = readme_file.read()


setup_kwargs = {
    'name': "deferral",
    'version': __version__,  # noqa
    'description': "Deferred values (promises) for asynchronous Python code",
    'long_description': long_description,
    'long_description_content_type': "text/x-rst",
    'license': "GPLv3",
    'classifiers': [
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 (GPLv3)",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Libraries"
    ],
    'keywords': "deferred promise future asynchronous",
    'packages': find_packages(exclude=['tests', 'tests.*']),
    'python_requires': '>=3.5',
    'install_requires': [],
    'extras_require': {
        'test': ['pytest', 'tox']
    },
    'zip_safe': False,
}


setup(**setup_kwargs)
