from .riksbank import RiksbankProvider

__all__ = ['RiksbankProvider']
