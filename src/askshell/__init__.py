"""Natural-language shell with danger screening and confirmation gating."""

from askshell.version import __version__

__all__ = ["__version__"]
