"""Handler modules for the Worker CR"""
from . import worker

__all__ = ['worker']
