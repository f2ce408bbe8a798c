# Copyright 2019 DeepMind Technologies Limited. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""Setup for pip package."""

import os

import setuptools

here = os.path.dirname(os.path.abspath(__file__))


def _get_nestwalk_version():
  """Parse the version string from nestwalk/__init__.py."""
  with open(os.path.join(here, 'nestwalk', '__init__.py')) as f:
    try:
      version_line = next(line for line in f if line.startswith('__version__'))
    except StopIteration:
      raise ValueError('__version__ not defined in nestwalk/__init__.py')
    else:
      ns = {}
      exec(version_line, ns)  # pylint: disable=exec-used
      return ns['__version__']


setuptools.setup(
    name='nestwalk',
    version=_get_nestwalk_version(),
    description=('Nestwalk walks, maps, filters and flattens nested data '
                 'structures.'),
    long_description=open(os.path.join(here, 'README.md')).read(),
    long_description_content_type='text/markdown',
    # Contained modules and scripts.
    packages=setuptools.find_packages(),
    python_requires='>=3.10',
    install_requires=[
        'absl-py>=0.6.1',
        'attrs>=22.2.0',
        'numpy>=1.21',
        "numpy>=1.21.2; python_version>='3.10'",
        "numpy>=1.23.3; python_version>='3.11'",
        "numpy>=1.26.0; python_version>='3.12'",
        "numpy>=2.1.0; python_version>='3.13'",
        'wrapt>=1.11.2',
    ],
    extras_require={
        'test': ['pytest'],
    },
    test_suite='nestwalk',
    zip_safe=False,
    # PyPI package information.
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Software Development :: Libraries',
    ],
    license='Apache 2.0',
    keywords='nest walk flatten flatmap',
)
