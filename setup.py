#!/usr/bin/env python
"""
Copyright 2025 Hathor Labs

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

   http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

import re
from pathlib import Path

from setuptools import find_packages, setup

# gdprconsent itself cannot be imported before its dependencies are installed
with open(Path(__file__).parent / 'gdprconsent' / 'version.py') as fp:
    __version__ = re.search(r"^BASE_VERSION = '([^']+)'", fp.read(), re.M).group(1)  # type: ignore[union-attr]

install_requires = [
    'colorama',
    'configargparse',
    'pydantic>=2',
    'pyyaml',
    'structlog',
    'typing_extensions',
]

setup(
    name='gdprconsent',
    version=__version__,
    description='IAB GDPR v1 vendor consent string decoder and encoder',
    author='Hathor Team',
    author_email='contact@hathor.network',
    url='https://hathor.network/',
    license='Apache License 2.0',
    entry_points={
        'console_scripts': ['gdpr-consent=gdprconsent.cli.main:main'],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
        'License :: OSI Approved :: Apache Software License',
    ],
    python_requires='>=3.10',
    packages=find_packages(exclude=('gdprconsent_tests', 'gdprconsent_tests.*')),
    package_data={'gdprconsent.conf': ['*.yml']},
    install_requires=install_requires,
    extras_require={
        'test': ['pytest'],
    },
)
