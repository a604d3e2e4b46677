"""Shared fixtures for domain rank tests."""

import io
import struct
import zipfile

import httpx
import pytest

from domain_rank.config import Settings

SAMPLE_CSV = "1,google.com\n2,youtube.com\n3,Example.com \n4,facebook.com\n"


def make_archive_bytes(text: str = SAMPLE_CSV, name: str = "top-1m.csv") -> bytes:
    """Zip ``text`` as a single member and return the archive bytes."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(name, text)
    return buf.getvalue()


def make_encrypted_archive_bytes(text: str = SAMPLE_CSV) -> bytes:
    """Archive whose single member carries the encryption flag."""
    data = bytearray(make_archive_bytes(text))
    local_flags = struct.unpack_from("<H", data, 6)[0]
    struct.pack_into("<H", data, 6, local_flags | 0x1)
    central = data.rindex(b"PK\x01\x02")
    central_flags = struct.unpack_from("<H", data, central + 8)[0]
    struct.pack_into("<H", data, central + 8, central_flags | 0x1)
    return bytes(data)


def make_corrupt_lzma_archive_bytes(text: str = SAMPLE_CSV) -> bytes:
    """LZMA archive whose member has invalid compression properties."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_LZMA) as zf:
        zf.writestr("top-1m.csv", text)
    data = bytearray(buf.getvalue())
    name_len, extra_len = struct.unpack_from("<HH", data, 26)
    payload_start = 30 + name_len + extra_len
    # 4-byte LZMA header, then the lc/lp/pb properties byte
    data[payload_start + 4] = 0xFF
    return bytes(data)


class CountingTransport(httpx.MockTransport):
    """MockTransport that serves a fixed payload and counts requests."""

    def __init__(self, payload: bytes = b"", status_code: int = 200, exc: Exception = None,
                 stream_chunk: int = None):
        self.calls = 0
        self.payload = payload
        self.status_code = status_code
        self.exc = exc
        self.stream_chunk = stream_chunk
        super().__init__(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        if self.stream_chunk:
            return httpx.Response(self.status_code, content=self._iter_payload())
        return httpx.Response(self.status_code, content=self.payload)

    def _iter_payload(self):
        for i in range(0, len(self.payload), self.stream_chunk):
            yield self.payload[i:i + self.stream_chunk]


@pytest.fixture
def settings(tmp_path):
    return Settings(
        RANK_SOURCE_URL="https://ranks.example.test/top-1m.csv.zip",
        RANK_CACHE_DIR=str(tmp_path / "cache"),
        RANK_FRESHNESS_DAYS=15,
        HTTP_TIMEOUT_SECONDS=5,
    )


@pytest.fixture
def transport():
    return CountingTransport(make_archive_bytes())


@pytest.fixture
def client(transport):
    with httpx.Client(transport=transport) as c:
        yield c
