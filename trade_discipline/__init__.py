"""
Trade Discipline Package

Trade planning and risk calculation for discretionary traders: position
sizing, tiered take-profit allocation, setup validation, the take-profit
lifecycle and funded-account journaling.
"""

__version__ = "1.0.0"
__author__ = "Trade Discipline Team"
