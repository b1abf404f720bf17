#!/usr/bin/env python
# encoding: utf-8

from setuptools import setup
import plistcodec as package

setup(
      name = package.__name__,
      version = package.__version__,
      packages = package.__packages__,
      author = package.__author__,
      description = package.__description__,
      license = package.__license__,
      long_description = package.__doc__,
      platforms = package.__platforms__,
      classifiers = package.__classifiers__,
      python_requires = '>=3.9',
      extras_require = {'test': ['pytest']},
)
