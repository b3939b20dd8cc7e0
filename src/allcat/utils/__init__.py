"""
Utilities Package.

Shared helpers that are not part of the streaming core, currently the rich
console and logging setup.
"""
