"""
MMR Accumulator Command Line Interface.

This package provides a demonstration driver that adds elements to an
in-memory accumulator, prints its root chain, and generates and checks
witnesses.
"""

from .main import cli

__all__ = [
    'cli',
]
