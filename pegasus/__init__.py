"""PEGASUS - Sistema de cobros."""

__version__ = "1.0.0"
