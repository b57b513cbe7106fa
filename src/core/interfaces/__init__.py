"""Core interfaces/abstractions.

Why:
- Defines contracts (Protocol) that adapters implement.
- Lets the core depend on abstractions instead of concrete decoders.
"""
