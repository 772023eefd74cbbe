"""Tests for registry availability checks (transport mocked, no network)."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from npname.constants import AuthType
from npname.models import (
    AuthInfo,
    AvailabilityOptions,
    BatchOptions,
    CheckFailedError,
    InvalidNameError,
    RequestTimeoutError,
    UnexpectedStatusError,
)
from npname.registry.availability import (
    build_package_url,
    check,
    check_availability,
    check_availability_many,
    interpret_status,
)

REGISTRY = "https://registry.npmjs.org/"
OPTIONS = AvailabilityOptions(registry_url=REGISTRY)


@pytest.fixture
def mock_head():
    with patch("npname.registry.availability.http_client.head", new_callable=AsyncMock) as head:
        head.return_value = 404
        yield head


@pytest.fixture(autouse=True)
def no_auth():
    with patch("npname.registry.availability.get_auth_token", return_value=None) as auth:
        yield auth


class TestInterpretStatus:
    """Status code to availability mapping."""

    @pytest.mark.parametrize("status", [200, 204, 299])
    def test_success_means_taken(self, status):
        assert interpret_status(status, False) is False

    def test_not_found_means_available(self):
        assert interpret_status(404, False) is True
        assert interpret_status(404, True) is True

    @pytest.mark.parametrize("status", [401, 403])
    def test_auth_required_is_unknown_for_scoped(self, status):
        assert interpret_status(status, True) is None

    @pytest.mark.parametrize("status", [401, 403, 500, 302, 429])
    def test_unexpected_status(self, status):
        with pytest.raises(UnexpectedStatusError) as exc_info:
            interpret_status(status, False)
        assert str(exc_info.value) == f"Unexpected response status: {status}"
        assert exc_info.value.status == status


class TestBuildPackageUrl:
    """Probe URL construction."""

    def test_unscoped(self):
        assert build_package_url("chalk", REGISTRY) == "https://registry.npmjs.org/chalk"

    def test_scoped_encodes_slash(self):
        assert build_package_url("@scope/pkg", REGISTRY) == "https://registry.npmjs.org/@scope%2fpkg"

    def test_registry_without_trailing_slash(self):
        assert build_package_url("chalk", "https://r.example/npm") == "https://r.example/npm/chalk"

    def test_organization_uses_website(self):
        assert build_package_url("@MyOrg", REGISTRY) == "https://www.npmjs.com/org/myorg"


class TestCheckAvailability:
    """Tests for check_availability."""

    def test_available(self, mock_head):
        assert asyncio.run(check_availability("nonexistent-pkg-xyz123abc", OPTIONS)) is True
        mock_head.assert_awaited_once()
        assert mock_head.await_args.args[0] == "https://registry.npmjs.org/nonexistent-pkg-xyz123abc"

    def test_taken(self, mock_head):
        mock_head.return_value = 200
        assert asyncio.run(check_availability("chalk", OPTIONS)) is False

    def test_scoped_auth_required_is_unknown(self, mock_head):
        mock_head.return_value = 401
        assert asyncio.run(check_availability("@private/pkg", OPTIONS)) is None
        assert mock_head.await_args.args[0] == "https://registry.npmjs.org/@private%2fpkg"

    def test_unscoped_auth_required_raises(self, mock_head):
        mock_head.return_value = 403
        with pytest.raises(UnexpectedStatusError):
            asyncio.run(check_availability("chalk", OPTIONS))

    def test_organization(self, mock_head, no_auth):
        mock_head.return_value = 403
        assert asyncio.run(check_availability("@someorg", OPTIONS)) is None
        assert mock_head.await_args.args[0] == "https://www.npmjs.com/org/someorg"
        assert mock_head.await_args.kwargs["headers"] == {}
        no_auth.assert_not_called()

    def test_default_timeout(self, mock_head):
        asyncio.run(check_availability("chalk", OPTIONS))
        assert mock_head.await_args.kwargs["timeout_ms"] == 10000

    def test_custom_timeout(self, mock_head):
        asyncio.run(check_availability("chalk", AvailabilityOptions(registry_url=REGISTRY, timeout=5000)))
        assert mock_head.await_args.kwargs["timeout_ms"] == 5000

    @pytest.mark.parametrize("timeout", [0, -5, 1.5, True])
    def test_rejects_non_positive_timeout(self, mock_head, timeout):
        with pytest.raises(ValueError, match="timeout must be a positive integer"):
            asyncio.run(check_availability("chalk", AvailabilityOptions(registry_url=REGISTRY, timeout=timeout)))
        mock_head.assert_not_awaited()

    def test_custom_registry_without_trailing_slash(self, mock_head):
        asyncio.run(check_availability("chalk", AvailabilityOptions(registry_url="https://npm.example.com")))
        assert mock_head.await_args.args[0] == "https://npm.example.com/chalk"

    def test_registry_resolved_when_not_given(self, mock_head):
        with patch(
            "npname.registry.availability.get_registry_url",
            return_value="https://resolved.example/",
        ) as resolver:
            asyncio.run(check_availability("chalk"))
        resolver.assert_called_once_with()
        assert mock_head.await_args.args[0] == "https://resolved.example/chalk"

    def test_authorization_header(self, mock_head, no_auth):
        no_auth.return_value = AuthInfo(token="abc", type=AuthType.BEARER)
        asyncio.run(check_availability("chalk", OPTIONS))
        no_auth.assert_called_once_with(REGISTRY)
        assert mock_head.await_args.kwargs["headers"] == {"authorization": "Bearer abc"}

    @pytest.mark.parametrize("name", ["", None, 42])
    def test_name_required(self, mock_head, name):
        with pytest.raises(ValueError, match="Package name required"):
            asyncio.run(check_availability(name, OPTIONS))
        mock_head.assert_not_awaited()

    @pytest.mark.parametrize("name,notice", [
        (".invalid", "name cannot start with a period"),
        ("-invalid", "name cannot start with a hyphen"),
        ("_invalid", "name cannot start with an underscore"),
        ("my package", "name can only contain URL-friendly characters"),
        ("node_modules", "node_modules is not a valid package name"),
        ("http", "http is a core module name"),
        ("crazy!", 'name can no longer contain special characters ("~\'!()*")'),
        ("@org/", "name can only contain URL-friendly characters"),
    ])
    def test_invalid_names(self, mock_head, name, notice):
        with pytest.raises(InvalidNameError) as exc_info:
            asyncio.run(check_availability(name, OPTIONS))
        assert f"- {notice}" in str(exc_info.value)
        mock_head.assert_not_awaited()

    def test_invalid_name_error_details(self, mock_head):
        with pytest.raises(InvalidNameError) as exc_info:
            asyncio.run(check_availability("Http", OPTIONS))
        err = exc_info.value
        assert str(err) == (
            "Invalid package name: Http\n"
            "- Http is a core module name\n"
            "- name can no longer contain capital letters"
        )
        assert err.errors == []
        assert err.warnings == ["Http is a core module name", "name can no longer contain capital letters"]

    def test_transport_errors_propagate(self, mock_head):
        mock_head.side_effect = RequestTimeoutError(10000)
        with pytest.raises(RequestTimeoutError, match="timed out after 10000ms"):
            asyncio.run(check_availability("chalk", OPTIONS))


class TestCheckAvailabilityMany:
    """Tests for batched checks."""

    def test_returns_mapping_in_input_order(self, mock_head):
        statuses = {"chalk": 200, "lodash": 200, "nonexistent-pkg-xyz123abc": 404}

        async def fake_head(url, **kwargs):
            return statuses[url.rsplit("/", 1)[1]]

        mock_head.side_effect = fake_head
        result = asyncio.run(check_availability_many(list(statuses), BatchOptions(registry_url=REGISTRY)))
        assert result == {"chalk": False, "lodash": False, "nonexistent-pkg-xyz123abc": True}
        assert list(result) == ["chalk", "lodash", "nonexistent-pkg-xyz123abc"]

    def test_empty_list(self, mock_head):
        assert asyncio.run(check_availability_many([])) == {}
        mock_head.assert_not_awaited()

    def test_single_item(self, mock_head):
        assert asyncio.run(check_availability_many(["solo-name"], BatchOptions(registry_url=REGISTRY))) == {
            "solo-name": True
        }

    @pytest.mark.parametrize("concurrency,expected_peak", [(1, 1), (3, 3), (4, 4), (20, 10)])
    def test_concurrency_caps_in_flight_requests(self, mock_head, concurrency, expected_peak):
        state = {"in_flight": 0, "peak": 0}

        async def fake_head(url, **kwargs):
            state["in_flight"] += 1
            state["peak"] = max(state["peak"], state["in_flight"])
            await asyncio.sleep(0.01)
            state["in_flight"] -= 1
            return 404

        mock_head.side_effect = fake_head
        names = [f"pkg-{i}" for i in range(10)]
        options = BatchOptions(registry_url=REGISTRY, concurrency=concurrency)
        result = asyncio.run(check_availability_many(names, options))
        assert len(result) == 10
        assert state["peak"] == expected_peak

    def test_next_batch_waits_for_previous(self, mock_head):
        events = []

        async def fake_head(url, **kwargs):
            name = url.rsplit("/", 1)[1]
            events.append(("start", name))
            # first name of each batch is the slowest
            await asyncio.sleep(0.03 if name in ("a-pkg", "c-pkg") else 0.001)
            events.append(("end", name))
            return 404

        mock_head.side_effect = fake_head
        options = BatchOptions(registry_url=REGISTRY, concurrency=2)
        asyncio.run(check_availability_many(["a-pkg", "b-pkg", "c-pkg", "d-pkg"], options))
        assert events.index(("start", "c-pkg")) > events.index(("end", "a-pkg"))
        assert events.index(("start", "d-pkg")) > events.index(("end", "a-pkg"))

    def test_options_passed_through(self, mock_head):
        options = BatchOptions(registry_url="https://custom.example", timeout=1234)
        asyncio.run(check_availability_many(["one-pkg"], options))
        assert mock_head.await_args.args[0] == "https://custom.example/one-pkg"
        assert mock_head.await_args.kwargs["timeout_ms"] == 1234
        assert mock_head.await_args.kwargs["session"] is not None

    @pytest.mark.parametrize("names", ["chalk", None, 42, {"chalk"}])
    def test_requires_list(self, names):
        with pytest.raises(TypeError, match="Expected an array of names"):
            asyncio.run(check_availability_many(names))

    @pytest.mark.parametrize("concurrency", [0, -1, 1.5, True])
    def test_rejects_bad_concurrency(self, concurrency):
        with pytest.raises(ValueError, match="concurrency"):
            asyncio.run(check_availability_many(["a"], BatchOptions(concurrency=concurrency)))

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_rejects_bad_timeout_before_any_request(self, mock_head, timeout):
        with pytest.raises(ValueError, match="timeout"):
            asyncio.run(check_availability_many(["a-pkg"], BatchOptions(registry_url=REGISTRY, timeout=timeout)))
        mock_head.assert_not_awaited()

    def test_all_invalid_names_aggregate(self, mock_head):
        with pytest.raises(CheckFailedError) as exc_info:
            asyncio.run(check_availability_many([".invalid", "-invalid"]))
        errors = exc_info.value.errors
        assert len(errors) == 2
        assert all(isinstance(err, InvalidNameError) for err in errors)
        assert "name cannot start with a period" in errors[0].errors
        assert "name cannot start with a hyphen" in errors[1].errors
        mock_head.assert_not_awaited()

    def test_mixed_batch_discards_partial_results(self, mock_head):
        mock_head.return_value = 200
        with pytest.raises(CheckFailedError) as exc_info:
            asyncio.run(check_availability_many(
                ["chalk", ".invalid", "lodash"],
                BatchOptions(registry_url=REGISTRY),
            ))
        assert str(exc_info.value) == "Some package checks failed"
        assert len(exc_info.value.errors) == 1
        assert mock_head.await_count == 2

    def test_failures_in_every_batch_are_collected(self, mock_head):
        async def fake_head(url, **kwargs):
            if url.endswith("slow-pkg"):
                raise RequestTimeoutError(kwargs["timeout_ms"])
            return 500

        mock_head.side_effect = fake_head
        options = BatchOptions(registry_url=REGISTRY, concurrency=1, timeout=50)
        with pytest.raises(CheckFailedError) as exc_info:
            asyncio.run(check_availability_many(["slow-pkg", "broken-pkg"], options))
        first, second = exc_info.value.errors
        assert isinstance(first, RequestTimeoutError)
        assert isinstance(second, UnexpectedStatusError)
        assert mock_head.await_count == 2


class TestCheck:
    """Tests for the non-raising full check."""

    def test_invalid_name_degrades(self, mock_head):
        result = asyncio.run(check("UPPER", OPTIONS))
        assert result.available is None
        assert isinstance(result.error, InvalidNameError)
        assert str(result.error) == "Invalid package name: UPPER"
        assert result.validation.suggestions == ["upper"]
        mock_head.assert_not_awaited()

    def test_non_string_degrades(self, mock_head):
        result = asyncio.run(check(None, OPTIONS))
        assert result.available is None
        assert result.validation.errors == ["name cannot be null"]
        assert isinstance(result.error, InvalidNameError)

    def test_available(self, mock_head):
        result = asyncio.run(check("free-name", OPTIONS))
        assert result.available is True
        assert result.error is None
        assert result.validation.valid is True

    def test_transport_error_degrades(self, mock_head):
        mock_head.side_effect = RequestTimeoutError(10)
        result = asyncio.run(check("some-name", OPTIONS))
        assert result.available is None
        assert isinstance(result.error, RequestTimeoutError)

    def test_to_dict(self, mock_head):
        mock_head.return_value = 200
        data = asyncio.run(check("chalk", OPTIONS)).to_dict()
        assert data["name"] == "chalk"
        assert data["available"] is False
        assert data["valid_for_new_packages"] is True
        assert "error" not in data
