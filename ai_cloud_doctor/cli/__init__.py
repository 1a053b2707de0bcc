"""
Command-line interface for AI Cloud Doctor.
"""
