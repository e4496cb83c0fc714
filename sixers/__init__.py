"""
Sixers - fantasy cricket scoring service
"""
__version__ = "0.1.0"
