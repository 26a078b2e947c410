# -*- coding: utf-8 -*-
"""Kettle version"""

__version__ = '0.3.0'
