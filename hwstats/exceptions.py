# hwstats/exceptions.py
"""Exception types shared across hwstats."""


class HwstatsError(Exception):
    """Base class for hwstats errors"""
    pass


class ConfigurationError(HwstatsError):
    """Configuration file could not be loaded or holds invalid values"""
    pass


class MalformedValueError(HwstatsError, ValueError):
    """A source responded but its value failed type or shape validation"""
    pass


class UnitConversionError(MalformedValueError):
    """A magnitude could not be converted into the requested unit"""
    pass
