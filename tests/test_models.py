from __future__ import annotations

import pytest

from haven.core.exceptions import InputError
from haven.domain.models import ConnectionConfig, ProbeResult, SessionState


def test_connection_config_validation() -> None:
    ConnectionConfig(host="h", port=22, user="u", remote_path="/w").validate()
    with pytest.raises(InputError):
        ConnectionConfig(host="", port=22, user="u", remote_path="/w").validate()
    with pytest.raises(InputError):
        ConnectionConfig(host="h", port=0, user="u", remote_path="/w").validate()
    with pytest.raises(InputError):
        ConnectionConfig(host="h", port=22, user="u", remote_path="w").validate()


def test_optional_fields_are_omitted() -> None:
    assert ConnectionConfig(host="h", port=22, user="u", remote_path="/w").to_dict() == {
        "host": "h",
        "port": 22,
        "user": "u",
        "remotePath": "/w",
    }
    assert SessionState(connected=False, start_time=5).to_dict() == {"connected": False, "startTime": 5}


def test_host_key_mismatch_detection() -> None:
    assert ProbeResult(False, "@@@ WARNING\nHost key verification failed.\n").host_key_mismatch is True
    assert ProbeResult(False, "Permission denied (publickey).").host_key_mismatch is False
    assert ProbeResult(True).host_key_mismatch is False
