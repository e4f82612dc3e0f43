"""Taildrop Native Host - browser-extension bridge to Tailscale file sharing.

This package implements a native-messaging host that lists Taildrop-capable
peers and sends files to them through the ``tailscale`` command-line tool.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
