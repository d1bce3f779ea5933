"""
Shapes and an async client for HTTP tracker announce responses.
"""
import logging
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

import aiohttp

from .config import DEFAULT_CONFIG, BencodeConfig
from .decoder import decode
from .parser import LIST_START
from .shapes import BYTES, INT, LONG, STRING, Field, ListOf, Record, Shape

logger = logging.getLogger(__name__)

COMPACT_PEER_LEN = 6  # 4 bytes IPv4 + 2 bytes port


class TrackerError(RuntimeError):
    """The tracker answered with a 'failure reason'."""


@dataclass
class Peer:
    ip: str
    port: int
    peer_id: Optional[bytes] = None


@dataclass
class TrackerResponse:
    failure_reason: Optional[str] = None
    warning_message: Optional[str] = None
    interval: Optional[int] = None
    min_interval: Optional[int] = None
    complete: Optional[int] = None
    incomplete: Optional[int] = None
    tracker_id: Optional[bytes] = None
    peers: List[Peer] = field(default_factory=list)


def compact_to_peers(blob: bytes) -> List[Peer]:
    """
    Decodes a compact peer list (6 bytes per peer: 4 for IP, 2 for port).
    A trailing partial entry is ignored.
    """
    peers = []
    for i in range(0, len(blob) - COMPACT_PEER_LEN + 1, COMPACT_PEER_LEN):
        ip = ".".join(str(b) for b in blob[i:i + 4])
        port = int.from_bytes(blob[i + 4:i + 6], "big")
        peers.append(Peer(ip, port))
    return peers


PEER_SHAPE = Record("Peer", [
    Field("ip", STRING),
    Field("port", INT),
    Field("peer id", BYTES, default=None, attr="peer_id"),
], factory=Peer)


class PeersShape(Shape):
    """Either a compact byte string or a list of peer dictionaries."""
    _dictionary_peers = ListOf(PEER_SHAPE)

    def decode(self, decoder):
        if decoder.reader.peek() == LIST_START:
            return decoder.decode_value(self._dictionary_peers)
        return compact_to_peers(decoder.decode_bytes())

    def __repr__(self):
        return "PeersShape()"


TRACKER_RESPONSE_SHAPE = Record("TrackerResponse", [
    Field("failure reason", STRING, default=None, attr="failure_reason"),
    Field("warning message", STRING, default=None, attr="warning_message"),
    Field("interval", LONG, default=None),
    Field("min interval", LONG, default=None, attr="min_interval"),
    Field("complete", LONG, default=None),
    Field("incomplete", LONG, default=None),
    Field("tracker id", BYTES, default=None, attr="tracker_id"),
    Field("peers", PeersShape(), default_factory=list),
], factory=TrackerResponse)


def decode_announce_response(data, config: Optional[BencodeConfig] = None) -> TrackerResponse:
    config = (config if config is not None else DEFAULT_CONFIG).with_options(ignore_unknown_keys=True)
    return decode(data, TRACKER_RESPONSE_SHAPE, config)


def pct_encode(b: bytes) -> str:
    # Correct percent-encoding for trackers: %HH per byte
    return "".join(f"%{byte:02X}" for byte in b)


def build_announce_url(url: str, params: Mapping) -> str:
    """Appends params to url; bytes values (info_hash, peer_id) are percent-encoded per byte."""
    encoded = []
    for k, v in params.items():
        value = pct_encode(v) if isinstance(v, bytes) else str(v)
        encoded.append(f"{k}={value}")

    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{'&'.join(encoded)}"


async def announce(url: str, params: Mapping, config: Optional[BencodeConfig] = None,
                   timeout: float = 30) -> TrackerResponse:
    """
    Sends an announce request and decodes the tracker's answer.
    Raises TrackerError when the tracker reports a failure.
    """
    full_url = build_announce_url(url, params)
    logger.debug("[Tracker] Announcing to %s", full_url)

    async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=timeout)) as session:
        async with session.get(full_url) as resp:
            data = await resp.read()

    response = decode_announce_response(data, config)
    if response.failure_reason:
        raise TrackerError("Tracker error: " + response.failure_reason)

    logger.debug("[Tracker] %s returned %d peers", url, len(response.peers))
    return response
