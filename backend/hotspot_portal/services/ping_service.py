"""
ICMP probe via the system ping binary.

The binary is started with an argument vector (no shell) and the target must
be a well-formed IPv4 address, so no user text reaches a command line.
"""
import asyncio
import logging
import platform
import re
import time
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

IS_WINDOWS = platform.system() == "Windows"

_IPV4 = re.compile(r"^(\d{1,3})\.(\d{1,3})\.(\d{1,3})\.(\d{1,3})$")
_RECEIVED = re.compile(r"\b1 (packets )?received", re.IGNORECASE)
_WINDOWS_TTL = re.compile(r"TTL=", re.IGNORECASE)
_LATENCY = re.compile(r"time[=<]([\d.]+)\s*ms", re.IGNORECASE)
_WINDOWS_LATENCY = re.compile(r"[=<](\d+)ms", re.IGNORECASE)


class PingResult(NamedTuple):
    online: bool
    latency_ms: Optional[int]


OFFLINE = PingResult(False, None)


def is_valid_ipv4(ip: Optional[str]) -> bool:
    match = _IPV4.match(ip or "")
    return bool(match) and all(int(octet) <= 255 for octet in match.groups())


def _ping_args(ip: str, timeout_secs: int) -> list:
    if IS_WINDOWS:
        return ["ping", "-n", "1", "-w", str(timeout_secs * 1000), ip]
    return ["ping", "-c", "1", "-W", str(timeout_secs), ip]


def parse_ping_output(output: str, elapsed_ms: int) -> PingResult:
    online = bool((_WINDOWS_TTL if IS_WINDOWS else _RECEIVED).search(output))
    if not online:
        return OFFLINE

    match = (_WINDOWS_LATENCY if IS_WINDOWS else _LATENCY).search(output)
    latency = round(float(match.group(1))) if match else elapsed_ms
    return PingResult(True, latency)


async def ping_host(ip: str, timeout_secs: int = 2) -> PingResult:
    """
    Send one echo request. Unreachable hosts, invalid addresses and timeouts
    all come back as an offline result rather than an exception.
    """
    if not is_valid_ipv4(ip):
        return OFFLINE

    start = time.monotonic()
    try:
        process = await asyncio.create_subprocess_exec(
            *_ping_args(ip, timeout_secs),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.DEVNULL
        )
    except OSError as e:
        logger.warning(f"[Ping] Could not run ping for {ip}: {e}")
        return OFFLINE

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout_secs + 2)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return OFFLINE

    elapsed_ms = int((time.monotonic() - start) * 1000)

    if process.returncode != 0:
        return OFFLINE

    return parse_ping_output(stdout.decode(errors="replace"), elapsed_ms)
