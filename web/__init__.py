"""
Web interface for the solar proposal engine.
"""
