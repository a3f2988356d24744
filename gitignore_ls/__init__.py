"""Language server for .gitignore-style ignore files"""

__version__ = "0.3.0"

__all__ = ['__version__']
