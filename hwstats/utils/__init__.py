"""
Unit conversion, derived metrics and logging helpers
"""

from .units import normalize, energy_to_charge, round_half_away
from .metrics import diagonal_inches, battery_health, battery_health_from_percent

__all__ = [
    'normalize',
    'energy_to_charge',
    'round_half_away',
    'diagonal_inches',
    'battery_health',
    'battery_health_from_percent'
]
