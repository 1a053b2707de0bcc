"""
Local job ledger for AI Cloud Doctor.
"""
