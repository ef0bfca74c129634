# -*- coding: utf-8 -*-
"""
Package information.
"""

__version__ = "0.1.0"
