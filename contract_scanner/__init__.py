"""
Contract Scanner - AI-assisted contract reading and risk detection.
"""
__version__ = "1.0.0"
