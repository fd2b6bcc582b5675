"""
Lane Shooter: aim, shoot and keep the enemies off the floor.
"""

__version__ = "0.1.0"
