"""Tests for address formatting and WTTP URL resolution."""

from unittest.mock import AsyncMock

import pytest
from support import HOST, make_config
from wttp_handler.addresses import format_address, is_name
from wttp_handler.core.resolver import AddressResolver
from wttp_handler.errors import NameResolutionError, UnsupportedSchemeError, UrlError


class TestFormatAddress:
    """Tests for format_address."""

    def test_lowercase_checksummed(self):
        assert format_address(HOST.lower()) == HOST

    def test_uppercase_checksummed(self):
        assert format_address("0x" + HOST[2:].upper()) == HOST

    def test_bad_checksum_rejected(self):
        """Test mixed-case input with a wrong checksum fails in strict mode."""
        bad = HOST[:-1] + ("d" if HOST[-1] == "D" else "D")
        with pytest.raises(ValueError):
            format_address(bad)

    def test_bad_checksum_lenient(self):
        bad = HOST[:-1] + ("d" if HOST[-1] == "D" else "D")
        assert format_address(bad, strict=False) == HOST

    @pytest.mark.parametrize("value", ["0x1234", "not-an-address", "", "0x" + "zz" * 20])
    def test_malformed(self, value):
        with pytest.raises(ValueError):
            format_address(value)

    def test_is_name(self):
        assert is_name("site.eth")
        assert is_name("Site.ETH")
        assert not is_name(HOST)


class TestAddressResolver:
    """Tests for AddressResolver."""

    @pytest.fixture
    def resolver(self):
        return AddressResolver(make_config())

    @pytest.mark.asyncio
    async def test_default_network(self, resolver):
        """Test that a URL without selector uses the first configured network."""
        endpoint = await resolver.resolve(f"wttp://{HOST}/index.html")
        assert endpoint.network.name == "localhost"
        assert endpoint.canonical_host == HOST
        assert endpoint.path == "/index.html"

    @pytest.mark.asyncio
    async def test_default_path(self, resolver):
        endpoint = await resolver.resolve(f"wttp://{HOST}")
        assert endpoint.path == "/"
        assert endpoint.url == f"wttp://{HOST}/"

    @pytest.mark.asyncio
    async def test_alias_equivalence(self, resolver):
        """Test that name, chain id, and short alias select the same network."""
        names = set()
        for selector in ("sepolia", "11155111", "seth", "SEPOLIA"):
            endpoint = await resolver.resolve(f"wttp://{HOST}:{selector}/")
            names.add(endpoint.network.name)
        assert names == {"sepolia"}

    @pytest.mark.asyncio
    async def test_local_aliases(self, resolver):
        for selector in ("localhost", "leth", "local", "31337"):
            endpoint = await resolver.resolve(f"wttp://{HOST}:{selector}/")
            assert endpoint.network.chain_id == 31337

    @pytest.mark.asyncio
    async def test_case_insensitive_host(self, resolver):
        """Test that lower- and upper-case hosts resolve to one canonical host."""
        lower = await resolver.resolve(f"wttp://{HOST.lower()}/")
        upper = await resolver.resolve(f"wttp://0x{HOST[2:].upper()}/")
        assert lower.canonical_host == upper.canonical_host == HOST
        assert lower.same_site(upper)
        assert lower.requested_host == HOST.lower()

    @pytest.mark.asyncio
    async def test_bad_checksum(self, resolver):
        bad = HOST[:-1] + ("d" if HOST[-1] == "D" else "D")
        with pytest.raises(UrlError, match="invalid host"):
            await resolver.resolve(f"wttp://{bad}/")

    @pytest.mark.asyncio
    async def test_bad_checksum_accepted_when_lenient(self):
        resolver = AddressResolver(make_config(strict_checksum=False))
        bad = HOST[:-1] + ("d" if HOST[-1] == "D" else "D")
        endpoint = await resolver.resolve(f"wttp://{bad}/")
        assert endpoint.canonical_host == HOST

    @pytest.mark.asyncio
    async def test_wrong_scheme(self, resolver):
        with pytest.raises(UrlError, match="scheme"):
            await resolver.resolve(f"https://{HOST}/")

    @pytest.mark.asyncio
    async def test_unsupported_scheme_status(self, resolver):
        with pytest.raises(UnsupportedSchemeError) as exc_info:
            await resolver.resolve(f"ipfs://{HOST}/")
        assert exc_info.value.status == 505

    @pytest.mark.asyncio
    async def test_missing_host(self, resolver):
        with pytest.raises(UrlError, match="missing host"):
            await resolver.resolve("wttp:///index.html")

    @pytest.mark.asyncio
    async def test_unknown_network(self, resolver):
        """Test that an unknown selector (including unconfigured mainnet) fails."""
        with pytest.raises(UrlError, match="unknown network"):
            await resolver.resolve(f"wttp://{HOST}:polygon/")
        with pytest.raises(UrlError, match="unknown network"):
            await resolver.resolve(f"wttp://{HOST}:eth/")

    @pytest.mark.asyncio
    async def test_invalid_host(self, resolver):
        with pytest.raises(UrlError):
            await resolver.resolve("wttp://example.com/")

    @pytest.mark.asyncio
    async def test_original_url_kept(self, resolver):
        url = f"wttp://{HOST.lower()}:seth/a"
        endpoint = await resolver.resolve(url)
        assert endpoint.original_url == url
        assert endpoint.url == f"wttp://{HOST}:seth/a"


class TestNameResolution:
    """Tests for resolving .eth host names."""

    @pytest.mark.asyncio
    async def test_name_resolved(self):
        """Test that names are resolved on the URL's network."""
        names = AsyncMock()
        names.resolve_name.return_value = HOST.lower()
        resolver = AddressResolver(make_config(), names)

        endpoint = await resolver.resolve("wttp://site.eth:sepolia/")

        assert endpoint.canonical_host == HOST
        assert endpoint.requested_host == "site.eth"
        called_name, called_network = names.resolve_name.call_args.args
        assert called_name == "site.eth"
        assert called_network.name == "sepolia"

    @pytest.mark.asyncio
    async def test_no_resolver(self):
        resolver = AddressResolver(make_config())
        with pytest.raises(NameResolutionError):
            await resolver.resolve("wttp://site.eth/")

    @pytest.mark.asyncio
    async def test_no_address_record(self):
        names = AsyncMock()
        names.resolve_name.return_value = None
        resolver = AddressResolver(make_config(), names)
        with pytest.raises(NameResolutionError) as exc_info:
            await resolver.resolve("wttp://site.eth/")
        assert exc_info.value.name == "site.eth"

    @pytest.mark.asyncio
    async def test_lookup_failure(self):
        names = AsyncMock()
        names.resolve_name.side_effect = ConnectionError("rpc down")
        resolver = AddressResolver(make_config(), names)
        with pytest.raises(NameResolutionError) as exc_info:
            await resolver.resolve("wttp://site.eth/")
        assert isinstance(exc_info.value.cause, ConnectionError)
        assert isinstance(exc_info.value, UrlError)
