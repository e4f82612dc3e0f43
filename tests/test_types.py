"""Tests for shared types module."""

from taildrop_host.types import Action, HostState, OSFamily, TaildropTargetStatus


class TestEnums:
    """Test enum definitions."""

    def test_action_values(self) -> None:
        """Action should carry the wire names."""
        assert Action.GET_DEVICES.value == "get_devices"
        assert Action.SEND_FILE.value == "send_file"

    def test_host_state_values(self) -> None:
        """HostState should have expected values."""
        assert HostState.STARTING.value == "starting"
        assert HostState.AWAITING_REQUEST.value == "awaiting_request"
        assert HostState.DISPATCHING.value == "dispatching"
        assert HostState.TERMINATED.value == "terminated"

    def test_os_family_values(self) -> None:
        """OSFamily should be the fixed icon set."""
        assert {f.value for f in OSFamily} == {"ios", "macos", "windows", "linux"}

    def test_taildrop_codes_match_tailscale(self) -> None:
        """Known codes should mirror tailscale's numbering."""
        assert TaildropTargetStatus.UNKNOWN == 0
        assert TaildropTargetStatus.AVAILABLE == 1
        assert TaildropTargetStatus.NO_NETMAP_AVAILABLE == 2
        assert TaildropTargetStatus.IPN_STATE_NOT_RUNNING == 3
        assert TaildropTargetStatus.MISSING_CAP == 4
        assert TaildropTargetStatus.OFFLINE == 5
        assert TaildropTargetStatus.NO_PEER_INFO == 6
        assert TaildropTargetStatus.UNSUPPORTED_OS == 7
        assert TaildropTargetStatus.NO_PEER_API == 8
        assert TaildropTargetStatus.OWNED_BY_OTHER_USER == 9


class TestTaildropTargetParse:
    """Tests for TaildropTargetStatus.parse."""

    def test_integer_code(self) -> None:
        """Integer codes map onto members."""
        assert TaildropTargetStatus.parse(1) is TaildropTargetStatus.AVAILABLE
        assert TaildropTargetStatus.parse(9) is TaildropTargetStatus.OWNED_BY_OTHER_USER

    def test_numeric_string(self) -> None:
        """Numeric strings are treated as codes."""
        assert TaildropTargetStatus.parse("1") is TaildropTargetStatus.AVAILABLE

    def test_name(self) -> None:
        """Names are accepted case-insensitively."""
        assert TaildropTargetStatus.parse("available") is TaildropTargetStatus.AVAILABLE
        assert TaildropTargetStatus.parse("Missing_Cap") is TaildropTargetStatus.MISSING_CAP
        assert TaildropTargetStatus.parse("no-peer-api") is TaildropTargetStatus.NO_PEER_API

    def test_unknown_code_is_unmapped(self) -> None:
        """Codes added by newer tailscale releases are UNMAPPED."""
        assert TaildropTargetStatus.parse(42) is TaildropTargetStatus.UNMAPPED
        assert TaildropTargetStatus.parse(-1) is TaildropTargetStatus.UNMAPPED
        assert TaildropTargetStatus.parse("teleported") is TaildropTargetStatus.UNMAPPED
        assert TaildropTargetStatus.parse("unmapped") is TaildropTargetStatus.UNMAPPED

    def test_other_types_are_unmapped(self) -> None:
        """Booleans, None and floats are not codes."""
        assert TaildropTargetStatus.parse(True) is TaildropTargetStatus.UNMAPPED
        assert TaildropTargetStatus.parse(None) is TaildropTargetStatus.UNMAPPED
        assert TaildropTargetStatus.parse(1.0) is TaildropTargetStatus.UNMAPPED

    def test_member_passthrough(self) -> None:
        """Members are returned unchanged."""
        assert TaildropTargetStatus.parse(TaildropTargetStatus.OFFLINE) is TaildropTargetStatus.OFFLINE
