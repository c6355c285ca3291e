"""
Core domain models, markup templates, and contracts.

This module contains the foundational building blocks that are independent
of the input layer and the rendering collaborator.
"""
