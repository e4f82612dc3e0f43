"""Tests for transfer/service.py - send_file handling."""

import base64
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from taildrop_host.errors import DecodeError, ExternalToolError, HostIOError, ValidationError
from taildrop_host.tailscale.runner import TailscaleClient
from taildrop_host.transfer.service import (
    FileTransferService,
    SendFileRequest,
    decode_data_url,
    resolve_extension,
    staged_file,
    validate_send_file_request,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake"
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode()


@pytest.fixture
def logger() -> logging.Logger:
    """Logger for service diagnostics."""
    return logging.getLogger("tests.transfer")


@pytest.fixture
def client() -> MagicMock:
    """Mock tailscale client."""
    return MagicMock(spec=TailscaleClient)


@pytest.fixture
def service(client, logger, tmp_path) -> FileTransferService:
    """Service staging files under tmp_path."""
    return FileTransferService(client, logger, temp_dir=tmp_path)


def make_request(**overrides) -> SendFileRequest:
    """Build a valid send request."""
    fields = {
        "device_name": "phone",
        "data_url": PNG_DATA_URL,
        "file_name": "cat.png",
        "mime_type": "image/png",
    }
    fields.update(overrides)
    return SendFileRequest(**fields)


class TestValidateSendFileRequest:
    """Tests for validate_send_file_request."""

    def test_valid(self):
        """A complete request passes."""
        validate_send_file_request(make_request())

    def test_missing_device(self):
        """Device name is required."""
        with pytest.raises(ValidationError, match="device name is required"):
            validate_send_file_request(make_request(device_name=""))

    def test_missing_data(self):
        """Image data is required."""
        with pytest.raises(ValidationError, match="image data is required"):
            validate_send_file_request(make_request(data_url=""))

    def test_missing_file_name(self):
        """File name is required."""
        with pytest.raises(ValidationError, match="file name is required"):
            validate_send_file_request(make_request(file_name=""))

    def test_missing_separator(self):
        """Payload must contain the data URL separator."""
        with pytest.raises(ValidationError, match="invalid image data format"):
            validate_send_file_request(make_request(data_url="aGVsbG8="))

    def test_mime_type_optional(self):
        """MIME type may be empty."""
        validate_send_file_request(make_request(mime_type=""))


class TestDecodeDataUrl:
    """Tests for decode_data_url."""

    def test_decodes(self):
        """Base64 after the first comma is decoded."""
        assert decode_data_url(PNG_DATA_URL) == PNG_BYTES

    def test_splits_at_first_separator(self):
        """Only the first comma separates metadata from payload."""
        with pytest.raises(DecodeError):
            decode_data_url("data:,aGVs,bG8=")

    def test_malformed_base64(self):
        """Bad base64 is a decode error."""
        with pytest.raises(DecodeError, match="failed to decode base64"):
            decode_data_url("data:image/png;base64,@@not-base64@@")

    def test_bad_padding(self):
        """Truncated base64 is a decode error."""
        with pytest.raises(DecodeError, match="failed to decode base64"):
            decode_data_url("data:image/png;base64,aGVsbG8")

    def test_no_separator(self):
        """Without a comma there is nothing to decode."""
        with pytest.raises(DecodeError, match="invalid data URL format"):
            decode_data_url("aGVsbG8=")

    def test_empty_payload(self):
        """An empty payload decodes to no bytes."""
        assert decode_data_url("data:,") == b""

    def test_line_breaks_skipped(self):
        """Wrapped base64 decodes as if it were on one line."""
        assert decode_data_url("data:x;base64,aGVs\nbG8=") == b"hello"
        assert decode_data_url("data:x;base64,aGVs\r\nbG8=\r\n") == b"hello"

    def test_other_whitespace_rejected(self):
        """Spaces are still outside the alphabet."""
        with pytest.raises(DecodeError, match="failed to decode base64"):
            decode_data_url("data:x;base64,aGVs bG8=")


class TestResolveExtension:
    """Tests for resolve_extension."""

    def test_from_file_name(self):
        """The file name's extension wins."""
        assert resolve_extension("cat.png", "image/jpeg") == ".png"

    def test_last_suffix(self):
        """Only the last suffix is used."""
        assert resolve_extension("archive.tar.gz", "") == ".gz"

    def test_from_mime_type(self):
        """MIME subtype is used when the file name has no extension."""
        assert resolve_extension("image", "image/webp") == ".webp"

    def test_mime_parameters_dropped(self):
        """Parameters after ';' are not part of the extension."""
        assert resolve_extension("image", "image/svg+xml; charset=utf-8") == ".svg+xml"

    def test_default(self):
        """Falls back to .jpg."""
        assert resolve_extension("image", "") == ".jpg"
        assert resolve_extension("image", "application") == ".jpg"
        assert resolve_extension("image", "image/") == ".jpg"

    def test_custom_default(self):
        """The fallback is configurable."""
        assert resolve_extension("image", "", default=".bin") == ".bin"

    def test_directory_in_name_ignored(self):
        """Dots in directory parts are not extensions."""
        assert resolve_extension("some.dir/image", "image/gif") == ".gif"

    def test_unsafe_subtype_ignored(self):
        """Subtypes that are not usable in a file name give the default."""
        assert resolve_extension("image", "image/..\\..\\x") == ".jpg"
        assert resolve_extension("image", "image/c:x") == ".jpg"
        assert resolve_extension("image", "image/p\x00ng") == ".jpg"
        assert resolve_extension("image", "image/p\tng") == ".jpg"
        assert resolve_extension("image", "image/a/b") == ".jpg"


class TestStagedFile:
    """Tests for staged_file."""

    def test_writes_and_removes(self, logger, tmp_path):
        """File holds the data inside the block and is gone after."""
        with staged_file(b"abc", ".png", logger, directory=tmp_path) as path:
            assert path.read_bytes() == b"abc"
            assert path.name.startswith("tailscale-sender-")
            assert path.suffix == ".png"
        assert not path.exists()

    def test_removed_on_error(self, logger, tmp_path):
        """File is removed when the block raises."""
        with pytest.raises(RuntimeError):
            with staged_file(b"abc", ".png", logger, directory=tmp_path) as path:
                raise RuntimeError("transfer failed")
        assert not path.exists()
        assert list(tmp_path.iterdir()) == []

    def test_unique_names(self, logger, tmp_path):
        """Concurrent staged files do not collide."""
        with staged_file(b"a", ".png", logger, directory=tmp_path) as first:
            with staged_file(b"b", ".png", logger, directory=tmp_path) as second:
                assert first != second

    def test_create_failure(self, logger, tmp_path):
        """A missing directory is a HostIOError."""
        with pytest.raises(HostIOError, match="failed to create temp file"):
            with staged_file(b"a", ".png", logger, directory=tmp_path / "missing"):
                pass

    def test_null_byte_in_suffix(self, logger, tmp_path):
        """A suffix the OS cannot represent is a HostIOError."""
        with pytest.raises(HostIOError, match="failed to create temp file"):
            with staged_file(b"a", ".p\x00ng", logger, directory=tmp_path):
                pass
        assert list(tmp_path.iterdir()) == []

    def test_already_removed(self, logger, tmp_path):
        """Removing a file the block already deleted is not an error."""
        with staged_file(b"a", ".png", logger, directory=tmp_path) as path:
            path.unlink()

    def test_remove_failure_logged(self, logger, tmp_path, caplog):
        """A failed removal is logged as a warning."""
        with (
            patch.object(Path, "unlink", side_effect=PermissionError("busy")),
            caplog.at_level(logging.WARNING, logger="tests.transfer"),
        ):
            with staged_file(b"a", ".png", logger, directory=tmp_path):
                pass
        assert "Failed to remove temp file" in caplog.text


class TestFileTransferService:
    """Tests for FileTransferService.send_file."""

    def test_sends_decoded_file(self, service, client, tmp_path):
        """The decoded bytes are staged and sent to the device."""
        seen: dict = {}

        def fake_cp(path, target):
            seen["path"] = path
            seen["target"] = target
            seen["data"] = path.read_bytes()

        client.file_cp.side_effect = fake_cp
        service.send_file(make_request())

        assert seen["target"] == "phone"
        assert seen["data"] == PNG_BYTES
        assert seen["path"].suffix == ".png"
        assert seen["path"].parent == tmp_path
        assert not seen["path"].exists()

    def test_transfer_failure_leaves_no_file(self, service, client, tmp_path):
        """A failed transfer still removes the staged file."""
        client.file_cp.side_effect = ExternalToolError("command failed: exit status 1", 1)
        for _ in range(3):
            with pytest.raises(ExternalToolError):
                service.send_file(make_request())
        assert list(tmp_path.iterdir()) == []

    def test_validation_before_decode(self, service, client):
        """Invalid requests never reach tailscale."""
        with pytest.raises(ValidationError):
            service.send_file(make_request(device_name=""))
        client.file_cp.assert_not_called()

    def test_decode_error(self, service, client, tmp_path):
        """Malformed base64 never stages a file."""
        with pytest.raises(DecodeError):
            service.send_file(make_request(data_url="data:image/png;base64,!!!"))
        client.file_cp.assert_not_called()
        assert list(tmp_path.iterdir()) == []

    def test_extension_from_mime(self, service, client):
        """Extensionless names take the MIME subtype."""
        service.send_file(make_request(file_name="download", mime_type="image/webp"))
        path = client.file_cp.call_args.args[0]
        assert path.suffix == ".webp"

    def test_custom_prefix_and_default(self, client, logger, tmp_path):
        """Prefix and default extension come from the constructor."""
        service = FileTransferService(
            client,
            logger,
            temp_prefix="custom-",
            temp_dir=tmp_path,
            default_extension=".bin",
        )
        service.send_file(make_request(file_name="download", mime_type=""))
        path = client.file_cp.call_args.args[0]
        assert path.name.startswith("custom-")
        assert path.suffix == ".bin"
