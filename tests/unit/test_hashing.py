"""
Hashing Unit Tests
Tests for core/crypto/hashing.py

Tests:
- sha256 known values
- cid_to_digest is the 32-byte ledger field
- local_cid placeholder format
"""
import hashlib

from core.crypto.hashing import (
    LOCAL_CID_PREFIX,
    cid_to_digest,
    local_cid,
    sha256,
)


class TestSha256:
    """Tests for sha256() function."""

    def test_sha256_known_value(self):
        result = sha256(b"hello")

        assert result == hashlib.sha256(b"hello").digest()
        assert len(result) == 32

    def test_sha256_empty_bytes(self):
        assert sha256(b"") == hashlib.sha256(b"").digest()


class TestCidDigest:
    def test_digest_is_sha256_of_cid_string(self):
        cid = "bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku"

        digest = cid_to_digest(cid)

        assert digest == hashlib.sha256(cid.encode("utf-8")).digest()
        assert len(digest) == 32

    def test_distinct_cids_distinct_digests(self):
        assert cid_to_digest("bafkreia") != cid_to_digest("bafkreib")


class TestLocalCid:
    def test_format(self):
        cid = local_cid(b'{"a":1}')

        assert cid.startswith(LOCAL_CID_PREFIX)
        assert len(cid) == len(LOCAL_CID_PREFIX) + 50
        assert cid[len(LOCAL_CID_PREFIX):] == hashlib.sha256(b'{"a":1}').hexdigest()[:50]

    def test_same_bytes_same_cid(self):
        assert local_cid(b"transcript") == local_cid(b"transcript")
        assert local_cid(b"transcript") != local_cid(b"transcript2")

    def test_custom_prefix(self):
        assert local_cid(b"x", prefix="bafkreie").startswith("bafkreie")
