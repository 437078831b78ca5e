# Block construction helpers

from .factory import create_default, create_section, fill_defaults

__all__ = ["create_default", "create_section", "fill_defaults"]
