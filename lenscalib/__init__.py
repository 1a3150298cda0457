"""Polymorphic camera lens models for geometric calibration."""

__version__ = "0.1.0"
__author__ = "Nagarjunan"

from . import calibration
from . import utils
