import sys
from pathlib import Path
from urllib.parse import parse_qsl

import httpx
import pytest

# Add src to sys.path so we can import core/adapters/cli
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from adapters.http_client import HttpTransport, build_client  # noqa: E402
from core.config import AppSettings  # noqa: E402
from core.services.tracker_client import TrackerClient  # noqa: E402


LOGON_XML = b'<?xml version="1.0" encoding="UTF-8"?><response><token>tok-123</token></response>'

FILTERS_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<response>
  <filters>
    <filter type="saved" sFilter="304" status="current">Cases I should close</filter>
    <filter type="builtin" sFilter="ez349">My Cases</filter>
  </filters>
</response>
"""

SEARCH_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<response>
  <description>All open cases assigned to me</description>
  <cases count="2">
    <case ixBug="42" operations="edit,assign">
      <sTitle><![CDATA[Crash on save]]></sTitle>
      <sStatus>Active</sStatus>
    </case>
    <case ixBug="43" operations="edit">
      <sTitle>Typo in footer</sTitle>
      <sStatus>Active</sStatus>
    </case>
  </cases>
</response>
"""

CASE_XML = b"""<?xml version="1.0" encoding="UTF-8"?>
<response>
  <description>Case 42</description>
  <cases count="1">
    <case ixBug="42" operations="edit">
      <sTitle>Crash on save</sTitle>
      <sPriority>Must Fix</sPriority>
      <events>
        <event ixBugEvent="1" ixBug="42"><evt>1</evt><evtDescription>Opened by Ana</evtDescription></event>
        <event ixBugEvent="2" ixBug="42"><evt>3</evt><evtDescription>Assigned to Bo</evtDescription></event>
      </events>
    </case>
  </cases>
</response>
"""

EMPTY_XML = b'<?xml version="1.0" encoding="UTF-8"?><response></response>'


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch, tmp_path):
    """Keep the developer's FOGBUGZ_* env and .env files out of the tests."""
    import os

    for key in list(os.environ):
        if key.upper().startswith("FOGBUGZ_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        domain="example.fogbugz.com",
        email="ana@example.com",
        password="s3cret",
        _env_file=None,
    )


class FakeTracker:
    """In-memory stand-in for api.asp, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.responses: dict[str, bytes] = {
            "logon": LOGON_XML,
            "listFilters": FILTERS_XML,
            "search": SEARCH_XML,
            "setCurrentFilter": EMPTY_XML,
            "startWork": EMPTY_XML,
            "stopWork": EMPTY_XML,
        }
        self.status: dict[str, int] = {}
        self.requests: list[httpx.Request] = []

    @property
    def methods(self) -> list[str]:
        return [request.url.params.get("cmd") for request in self.requests]

    def form(self, index: int = -1) -> dict[str, str]:
        return dict(parse_qsl(self.requests[index].content.decode("utf-8")))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        cmd = request.url.params.get("cmd", "")
        return httpx.Response(self.status.get(cmd, 200), content=self.responses.get(cmd, b""))


@pytest.fixture
def fake_tracker() -> FakeTracker:
    return FakeTracker()


@pytest.fixture
def transport(settings, fake_tracker) -> HttpTransport:
    client = build_client(settings, transport=httpx.MockTransport(fake_tracker.handler))
    return HttpTransport(settings, client=client)


@pytest.fixture
def tracker(settings, transport) -> TrackerClient:
    return TrackerClient(settings, transport=transport)
