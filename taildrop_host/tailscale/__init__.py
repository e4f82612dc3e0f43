"""Tailscale CLI gateway.

This module handles:
- Invoking the tailscale CLI as a subprocess
- Parsing its JSON status output
"""

from taildrop_host.tailscale.models import TailscalePeer, TailscaleStatus
from taildrop_host.tailscale.runner import TailscaleClient, ToolRunner

__all__ = ["TailscaleClient", "TailscalePeer", "TailscaleStatus", "ToolRunner"]
