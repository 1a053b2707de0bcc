"""
AI Cloud Doctor.

Collects AWS usage data through the AWS CLI and summarizes it with an LLM.
"""
