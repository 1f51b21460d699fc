"""
setup.py
========

Setup script for svcrotate package.
"""

import os
import sys

from setuptools import setup


cwd = os.getcwd()
if os.path.dirname(__file__):
    os.chdir(os.path.dirname(__file__))
sys.path.insert(0, os.getcwd())
try:
    from info import info

    setup(**info)
finally:
    os.chdir(cwd)
