"""
Core modules for AI Cloud Doctor.

This package contains token accounting, pricing, prompt construction and
the console formatting of model responses and collected data.
"""
