"""Tests for URL validation and canonicalization."""

import pytest

from knowledge_backend.core.ingestion.url_safety import (
    UnsafeURLError,
    canonicalize_url,
    is_private_hostname,
    validate_public_url,
)


class TestIsPrivateHostname:
    """Test the private-host guard."""

    @pytest.mark.parametrize(
        "host",
        [
            "",
            None,
            "localhost",
            "LOCALHOST",
            "api.localhost",
            "printer.local",
            "127.0.0.1",
            "10.0.0.5",
            "172.16.4.1",
            "172.31.255.255",
            "192.168.1.1",
            "169.254.169.254",
            "0.0.0.0",
            "::1",
            "[::1]",
            "fd00::1",
            "fe80::1",
            "127.1",
            "2130706433",
            "0x7f000001",
            "0177.0.0.1",
            "10.1",
            "0xa.0.0.1",
        ],
    )
    def test_blocked(self, host) -> None:
        assert is_private_hostname(host) is True

    @pytest.mark.parametrize(
        "host",
        ["example.com", "8.8.8.8", "172.32.0.1", "2606:4700::1111", "134744072", "0x8.8.8.8", "3com.example"],
    )
    def test_public(self, host) -> None:
        assert is_private_hostname(host) is False


class TestValidatePublicUrl:
    """Test URL admission rules."""

    def test_accepts_public_https(self) -> None:
        assert validate_public_url("  https://example.com/a ") == "https://example.com/a"

    @pytest.mark.parametrize(
        "url",
        [
            "ftp://example.com/file",
            "javascript:alert(1)",
            "https://",
            "not a url",
            "http://127.0.0.1/admin",
            "http://10.0.0.5/",
            "http://example.com:99999/",
            "http://127.1/admin",
            "http://2130706433/",
            "http://0x7f000001/",
            "http://0177.0.0.1/",
            "http://10.1/",
        ],
    )
    def test_rejects(self, url) -> None:
        with pytest.raises(UnsafeURLError):
            validate_public_url(url)


class TestCanonicalizeUrl:
    """Test dedup canonical form."""

    def test_lowercases_scheme_and_host_and_strips_fragment(self) -> None:
        assert canonicalize_url("HTTPS://Example.COM/Path#section") == "https://example.com/Path"

    def test_default_ports_removed(self) -> None:
        assert canonicalize_url("http://example.com:80/a") == "http://example.com/a"
        assert canonicalize_url("https://example.com:443/a") == "https://example.com/a"
        assert canonicalize_url("https://example.com:8443/a") == "https://example.com:8443/a"

    def test_empty_path_becomes_slash(self) -> None:
        assert canonicalize_url("https://example.com") == "https://example.com/"

    def test_trailing_slash_and_query_variants_stay_distinct(self) -> None:
        assert canonicalize_url("https://example.com/a") != canonicalize_url("https://example.com/a/")
        assert canonicalize_url("https://example.com/a?x=1") == "https://example.com/a?x=1"
