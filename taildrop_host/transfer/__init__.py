"""File transfer module."""

from taildrop_host.transfer.service import FileTransferService, SendFileRequest

__all__ = ["FileTransferService", "SendFileRequest"]
