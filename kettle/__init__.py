# -*- coding: utf-8 -*-
"""Kettle

This module integrates the Schrödinger equation for kets, bras and
propagators under static or time and state dependent generators.
"""

from .version import __version__

from .bases import *
from .states import *
from .operators import *
from .views import *
from .schroedinger import *
from .exceptions import *
from .integration import IntegratorOptions, integrate

from . import config
