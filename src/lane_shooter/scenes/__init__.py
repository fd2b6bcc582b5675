"""
Lane Shooter scenes
"""
