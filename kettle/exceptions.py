# -*- coding: utf-8 -*-
"""Kettle Exceptions"""

class IncompatibleBases(Exception):
    """Exception class indicating that two objects do not live in the same Hilbert space"""
    def __init__(self, message: str = "Bases of the operands are incompatible.") -> None:
        Exception.__init__(self, message)


class ConfigurationError(ValueError):
    """Exception class indicating invalid integrator options or user configuration"""


class IntegrationError(RuntimeError):
    """Exception class indicating that the ODE solver could not finish the requested evolution"""
