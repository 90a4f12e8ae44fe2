"""Resolving IDs to names through DNS TXT records."""

from __future__ import annotations

import logging
from collections.abc import Callable

import dns.exception
import dns.resolver

from .idlist import IdCategory

_LOG = logging.getLogger("pcinames")

_CLASS_IN = 1
_TYPE_TXT = 16
_NUM_SECTIONS = 4
_ANSWER = 1

Resolver = Callable[[str], "bytes | None"]


class DnsFormatError(ValueError):
    """A DNS packet is malformed."""


def dns_query_name(cat: int, id1: int, id2: int, id3: int, id4: int) -> str | None:
    """Return the name queried for an ID, relative to the lookup domain."""
    formats = {
        IdCategory.VENDOR: lambda: f"{id1:04x}",
        IdCategory.DEVICE: lambda: f"{id2:04x}.{id1:04x}",
        IdCategory.SUBSYSTEM: lambda: f"{id4:04x}.{id3:04x}.{id2:04x}.{id1:04x}",
        IdCategory.GEN_SUBSYSTEM: lambda: f"{id2:04x}.{id1:04x}.s",
        IdCategory.CLASS: lambda: f"{id1:02x}.c",
        IdCategory.SUBCLASS: lambda: f"{id2:02x}.{id1:02x}.c",
        IdCategory.PROGIF: lambda: f"{id3:02x}.{id2:02x}.{id1:02x}.c",
    }
    try:
        build = formats[IdCategory(cat)]
    except (KeyError, ValueError):
        return None
    return build()


def _skip_name(buf: bytes, p: int, end: int) -> int | None:
    while p < end:
        x = buf[p]
        p += 1
        if not x:
            return p
        kind = x & 0xC0
        if kind == 0:
            p += x
        elif kind == 0xC0:
            p += 1
            return p if p < end else None
        else:
            return None
    return None


def _get(buf: bytes, p: int, end: int, size: int) -> tuple[int, int]:
    if p + size > end:
        raise DnsFormatError("Truncated DNS packet")
    return int.from_bytes(buf[p:p + size], "big"), p + size


def _sections(buf: bytes) -> list[int]:
    """Return the start offsets of the four sections and the end of the last."""
    end = len(buf)
    _, p = _get(buf, 0, end, 4)
    counts = []
    for _ in range(_NUM_SECTIONS):
        count, p = _get(buf, p, end, 2)
        counts.append(count)
    starts = []
    for section, count in enumerate(counts):
        starts.append(p)
        for _ in range(count):
            q = _skip_name(buf, p, end)
            if q is None:
                raise DnsFormatError("Bad name in DNS packet")
            _, p = _get(buf, q, end, 4)
            if section != 0:
                _, p = _get(buf, p, end, 4)
                length, p = _get(buf, p, end, 2)
                p += length
                if p > end:
                    raise DnsFormatError("Truncated record data")
    starts.append(p)
    return starts


def parse_txt_answers(packet: bytes) -> list[str]:
    """Return the strings of all IN TXT records in the answer section.

    Raises DnsFormatError if the packet cannot be parsed.
    """
    buf = bytes(packet)
    sections = _sections(buf)
    p, end = sections[_ANSWER], sections[_ANSWER + 1]
    texts: list[str] = []
    while p < end:
        q = _skip_name(buf, p, end)
        if q is None:
            break
        try:
            rr_type, q = _get(buf, q, end, 2)
            rr_class, q = _get(buf, q, end, 2)
            _, q = _get(buf, q, end, 4)
            rr_len, q = _get(buf, q, end, 2)
        except DnsFormatError:
            break
        data = buf[q:q + rr_len]
        p = q + rr_len
        if rr_class != _CLASS_IN or rr_type != _TYPE_TXT:
            _LOG.debug("\tUnexpected RR in answer: class %d, type %d", rr_class, rr_type)
            continue
        j = 0
        while j < len(data) and j + 1 + data[j] <= len(data):
            chunk = data[j + 1:j + 1 + data[j]].split(b"\x00", 1)[0]
            j += 1 + data[j]
            text = chunk.decode("utf-8", "replace")
            _LOG.debug('\t"%s"', text)
            texts.append(text)
    return texts


def _system_resolver(qname: str) -> bytes | None:
    try:
        answer = dns.resolver.resolve(qname, "TXT", raise_on_no_answer=False)
    except dns.exception.DNSException as exc:
        _LOG.debug("\tfailed, %s", exc)
        return None
    return answer.response.to_wire()


def net_lookup(domain: str | None, cat: int, id1: int, id2: int, id3: int, id4: int,
               resolver: Resolver | None = None) -> str | None:
    """Look up a name in DNS under `domain`; None if it cannot be found.

    `resolver` takes a query name and returns the raw response packet,
    or None on failure. The system resolver is used by default.
    """
    if not domain:
        return None
    name = dns_query_name(cat, id1, id2, id3, id4)
    if name is None:
        return None
    qname = f"{name[:100]}.{domain[:100]}"
    _LOG.debug("Resolving %s", qname)
    packet = (resolver or _system_resolver)(qname)
    if packet is None:
        return None
    try:
        texts = parse_txt_answers(packet)
    except DnsFormatError:
        _LOG.debug("\tMalformed DNS packet received")
        return None
    return next((t[2:] for t in texts if t.startswith("i=")), None)