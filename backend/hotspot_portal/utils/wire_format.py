"""
Decoder for the compact text format pushed by the router scripts.

Records are separated by ';' and fields by ','. There is no escaping, so a
hostname or domain containing ',', ';' or '>' splits into the wrong fields;
senders already rely on this grammar and it is kept as is.

    clients:      IP,Hostname [MAC],bytesUp,bytesDown;
    interfaces:   Name,txDelta,rxDelta,up|down;
    connections:  srcIP,dstIP,dstPort,bytesOrig,bytesReply;
    dns:          domain>ip;

Malformed records are skipped one by one; a bad record never fails the batch.
"""
import re
from typing import Dict, List, Optional

_DIGITS = re.compile(r"^\d+$")
_MAC_SUFFIX = re.compile(r"\[([^\]]+)\]$")


def safe_int(value: Optional[str]) -> int:
    """Non-negative integer field; anything unparsable becomes 0"""
    trimmed = (value or "").strip()
    return int(trimmed) if _DIGITS.match(trimmed) else 0


def _parse_port(value: str) -> Optional[int]:
    trimmed = (value or "").strip()
    return int(trimmed) if _DIGITS.match(trimmed) else None


def _records(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [entry.strip() for entry in raw.split(";") if entry.strip()]


def parse_clients(raw: Optional[str]) -> List[Dict]:
    result = []
    for entry in _records(raw):
        parts = entry.split(",")
        if len(parts) < 4:
            continue
        
        ip = parts[0].strip()
        if not ip:
            continue
        
        # "NOTEBOOK01 [AA:BB:CC:DD:EE:FF]" - the MAC suffix is optional
        host_and_mac = parts[1].strip()
        match = _MAC_SUFFIX.search(host_and_mac)
        if match:
            mac = match.group(1).strip() or None
            hostname = host_and_mac[:match.start()].strip()
        else:
            mac = None
            hostname = host_and_mac
        
        result.append({
            "ip_address": ip,
            "hostname": hostname or None,
            "mac_address": mac,
            "bytes_up": safe_int(parts[2]),
            "bytes_down": safe_int(parts[3]),
        })
    return result


def parse_interfaces(raw: Optional[str]) -> List[Dict]:
    result = []
    for entry in _records(raw):
        parts = entry.split(",")
        if len(parts) < 4:
            continue
        result.append({
            "interface_name": parts[0].strip(),
            "tx_bytes": safe_int(parts[1]),
            "rx_bytes": safe_int(parts[2]),
            "is_up": parts[3].strip().lower() == "up",
        })
    return result


def parse_connections(raw: Optional[str]) -> List[Dict]:
    result = []
    for entry in _records(raw):
        parts = entry.split(",")
        if len(parts) < 5:
            continue
        result.append({
            "src_ip": parts[0].strip(),
            "dst_ip": parts[1].strip(),
            "dst_port": _parse_port(parts[2]),
            "bytes_orig": safe_int(parts[3]),
            "bytes_reply": safe_int(parts[4]),
        })
    return result


def parse_dns(raw: Optional[str]) -> List[Dict]:
    result = []
    for entry in _records(raw):
        domain, sep, ip = entry.partition(">")
        if not sep:
            continue
        domain = domain.strip()
        if not domain:
            continue
        result.append({"domain": domain, "ip_address": ip.strip() or None})
    return result
