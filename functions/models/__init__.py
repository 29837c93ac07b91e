"""
LLM adapters used by the destination pipeline.
"""
