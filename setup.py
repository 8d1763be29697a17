#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Setup shim for proxysvar.

All project metadata, dependencies and extras live in pyproject.toml; this
file only lets tools that still call ``setup.py`` build the package.
"""

import setuptools

if __name__ == "__main__":
    setuptools.setup()
