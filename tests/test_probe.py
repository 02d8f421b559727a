import asyncio
import errno

import pytest

from ip_sweeper import probe as probe_module
from ip_sweeper.errors import ProbeTransportError
from ip_sweeper.probe import PingProbe


class FakeProcess:
    def __init__(self, returncode=0, stdout=b"", stderr=b"", hang=False):
        self.returncode = returncode
        self._stdout = stdout
        self._stderr = stderr
        self._hang = hang
        self.killed = False

    async def communicate(self):
        if self._hang:
            raise asyncio.TimeoutError()
        return self._stdout, self._stderr

    def kill(self):
        self.killed = True

    async def wait(self):
        return self.returncode


def _install_process(monkeypatch, process, commands=None):
    async def fake_exec(*cmd, **kwargs):
        if commands is not None:
            commands.append(list(cmd))
        return process

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)


def _run_probe(probe, address):
    events = []

    async def scenario():
        await probe(address,
                    lambda addr, rtt: events.append(("success", addr, rtt)),
                    lambda addr: events.append(("complete", addr)))

    asyncio.run(scenario())
    return events


LINUX_REPLY = (
    b"PING 10.0.0.1 (10.0.0.1) 56(84) bytes of data.\n"
    b"64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=0.412 ms\n"
)


def test_build_command_posix():
    probe = PingProbe(timeout=2.0)
    probe.system = "linux"

    assert probe.build_command("10.0.0.1") == ["ping", "-c", "1", "-W", "2", "10.0.0.1"]


def test_build_command_windows():
    probe = PingProbe(timeout=0.5)
    probe.system = "windows"

    assert probe.build_command("10.0.0.1") == ["ping", "-n", "1", "-w", "500", "10.0.0.1"]


@pytest.mark.parametrize("output,expected", [
    ("64 bytes from 10.0.0.1: icmp_seq=1 ttl=64 time=0.412 ms", 0.412),
    ("Reply from 10.0.0.1: bytes=32 time<1ms TTL=128", 1.0),
    ("Ответ от 10.0.0.1: число байт=32 время=14мс TTL=57", 14.0),
    ("Request timed out.", None),
])
def test_extract_latency(output, expected):
    assert PingProbe.extract_latency(output) == expected


def test_reply_reports_success_then_complete(monkeypatch):
    commands = []
    _install_process(monkeypatch, FakeProcess(0, LINUX_REPLY), commands)

    events = _run_probe(PingProbe(timeout=1.0), "10.0.0.1")

    assert events == [("success", "10.0.0.1", 0.412), ("complete", "10.0.0.1")]
    assert commands[0][-1] == "10.0.0.1"


@pytest.mark.parametrize("returncode", [1, 2])
def test_no_reply_only_completes(monkeypatch, returncode):
    _install_process(monkeypatch, FakeProcess(returncode, b"", b"connect: Network is unreachable"))

    events = _run_probe(PingProbe(), "10.0.0.9")

    assert events == [("complete", "10.0.0.9")]


def test_timeout_kills_process_and_completes(monkeypatch):
    process = FakeProcess(hang=True)
    _install_process(monkeypatch, process)

    events = _run_probe(PingProbe(), "10.0.0.7")

    assert process.killed
    assert events == [("complete", "10.0.0.7")]


def test_invalid_address_is_transport_error():
    with pytest.raises(ProbeTransportError) as excinfo:
        _run_probe(PingProbe(), "300.1.1.1")

    assert excinfo.value.address == "300.1.1.1"


def test_missing_ping_binary_is_transport_error(monkeypatch):
    async def fake_exec(*cmd, **kwargs):
        raise FileNotFoundError("ping")

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)

    with pytest.raises(ProbeTransportError):
        _run_probe(PingProbe(), "10.0.0.1")


def test_permission_denied_is_transport_error(monkeypatch):
    async def fake_exec(*cmd, **kwargs):
        raise PermissionError(errno.EACCES, "Permission denied", "ping")

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)

    with pytest.raises(ProbeTransportError):
        _run_probe(PingProbe(), "10.0.0.1")


@pytest.mark.parametrize("code", [errno.EMFILE, errno.EAGAIN])
def test_resource_shortage_completes_without_reply(monkeypatch, caplog, code):
    attempts = []

    async def fake_exec(*cmd, **kwargs):
        attempts.append(cmd)
        raise OSError(code, "no resources")

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)

    events = _run_probe(PingProbe(), "10.0.0.4")

    assert events == [("complete", "10.0.0.4")]
    assert len(attempts) == 1
    assert "10.0.0.4" in caplog.text


def test_other_launch_failure_is_transport_error(monkeypatch):
    async def fake_exec(*cmd, **kwargs):
        raise OSError(errno.ENOEXEC, "Exec format error")

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)

    with pytest.raises(ProbeTransportError):
        _run_probe(PingProbe(), "10.0.0.1")


def test_running_ping_processes_are_capped(monkeypatch):
    running = []
    peak = []

    class SlowProcess(FakeProcess):
        async def communicate(self):
            running.append(self)
            peak.append(len(running))
            await asyncio.sleep(0.005)
            running.remove(self)
            return b"", b""

    async def fake_exec(*cmd, **kwargs):
        return SlowProcess(1)

    monkeypatch.setattr(probe_module.asyncio, "create_subprocess_exec", fake_exec)
    pinger = PingProbe(concurrent_limit=3)
    completed = []

    async def scenario():
        await asyncio.gather(*(
            pinger(f"10.0.0.{i}", lambda addr, rtt: None, completed.append)
            for i in range(1, 21)
        ))

    asyncio.run(scenario())

    assert len(completed) == 20
    assert max(peak) == 3


def test_limit_survives_separate_event_loops(monkeypatch):
    _install_process(monkeypatch, FakeProcess(1))
    pinger = PingProbe(concurrent_limit=1)

    assert _run_probe(pinger, "10.0.0.1") == [("complete", "10.0.0.1")]
    assert _run_probe(pinger, "10.0.0.2") == [("complete", "10.0.0.2")]
