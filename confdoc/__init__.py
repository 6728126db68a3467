"""
confdoc — configuration reference tables generated from declarations.

Configuration modules import the markers from here:

    from confdoc import generate, option, register, rename_all
"""

from confdoc.markers import generate, option, register, rename_all

__version__ = "0.1.0"

__all__ = ["__version__", "generate", "option", "register", "rename_all"]
