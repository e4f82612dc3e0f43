"""Native messaging module.

This module handles:
- Length-prefixed JSON framing on stdin/stdout
- Request and response schemas
"""

from taildrop_host.messaging.codec import NativeMessagingCodec
from taildrop_host.messaging.schemas import NativeRequest, NativeResponse

__all__ = ["NativeMessagingCodec", "NativeRequest", "NativeResponse"]
