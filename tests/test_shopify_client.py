"""
Tests for the Shopify GraphQL client over a mocked transport.
"""

import json

import httpx
import pytest

from bulk_editor.shopify import (
    ShopifyAuthError,
    ShopifyClient,
    ShopifyClientError,
    fetch_current_bulk_operation,
    normalize_shop_domain,
    user_error_messages,
)

from .helpers import SHOP


def make_client(handler):
    client = ShopifyClient(
        f"https://{SHOP}/", "shpat_test", transport=httpx.MockTransport(handler)
    )
    client.BASE_RETRY_DELAY = 0
    return client


class TestHelpers:
    """Tests for module helpers."""

    def test_normalize_shop_domain(self):
        assert normalize_shop_domain(f"https://{SHOP}/") == SHOP
        assert normalize_shop_domain(f" http://{SHOP} ") == SHOP
        assert normalize_shop_domain(SHOP) == SHOP

    def test_user_error_messages(self):
        payload = {"userErrors": [{"field": ["price"], "message": "Price is invalid"}]}
        assert user_error_messages(payload) == ["Price is invalid"]
        assert user_error_messages({"userErrors": []}) == []
        assert user_error_messages(None) == []


class TestExecute:
    """Tests for ShopifyClient.execute."""

    @pytest.mark.asyncio
    async def test_posts_query_and_returns_data(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["token"] = request.headers["X-Shopify-Access-Token"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"data": {"shop": {"name": "Test"}}})

        async with make_client(handler) as client:
            data = await client.execute("query { shop { name } }", {"a": 1})

        assert data == {"shop": {"name": "Test"}}
        assert seen["url"] == f"https://{SHOP}/admin/api/2025-01/graphql.json"
        assert seen["token"] == "shpat_test"
        assert seen["body"] == {"query": "query { shop { name } }", "variables": {"a": 1}}

    def test_api_version_is_configurable(self):
        client = ShopifyClient(SHOP, "t", api_version="2024-10")
        assert client.graphql_url == f"https://{SHOP}/admin/api/2024-10/graphql.json"

    @pytest.mark.asyncio
    async def test_unauthorized_raises_auth_error(self):
        client = make_client(lambda request: httpx.Response(401))
        try:
            with pytest.raises(ShopifyAuthError):
                await client.execute("query { shop { name } }")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_graphql_errors_raise(self):
        def handler(request):
            return httpx.Response(200, json={"errors": [{"message": "Field 'nope' doesn't exist"}]})

        client = make_client(handler)
        try:
            with pytest.raises(ShopifyClientError, match="nope"):
                await client.execute("query { nope }")
        finally:
            await client.close()

    @pytest.mark.asyncio
    async def test_rate_limit_is_retried(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            if len(attempts) == 1:
                return httpx.Response(429, headers={"Retry-After": "0"})
            if len(attempts) == 2:
                return httpx.Response(200, json={"errors": [{"message": "Throttled"}]})
            return httpx.Response(200, json={"data": {"ok": True}})

        client = make_client(handler)
        try:
            assert await client.execute("query { ok }") == {"ok": True}
        finally:
            await client.close()

        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_transport_errors_give_up_after_max_retries(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)
        try:
            with pytest.raises(ShopifyClientError, match="Request error"):
                await client.execute("query { ok }")
        finally:
            await client.close()

        assert len(attempts) == ShopifyClient.MAX_RETRIES


class TestBulkOperationStatus:
    """Tests for fetch_current_bulk_operation."""

    @pytest.mark.asyncio
    async def test_running_operation(self):
        def handler(request):
            return httpx.Response(200, json={"data": {"currentBulkOperation": {
                "id": "gid://shopify/BulkOperation/1",
                "status": "RUNNING",
                "errorCode": None,
                "objectCount": "12",
                "url": None,
                "partialDataUrl": None,
            }}})

        client = make_client(handler)
        try:
            operation = await fetch_current_bulk_operation(client)
        finally:
            await client.close()

        assert operation.status == "RUNNING"
        assert operation.object_count == 12
        assert operation.is_finished is False
        assert operation.to_dict() == {
            "id": "gid://shopify/BulkOperation/1",
            "status": "RUNNING",
            "errorCode": None,
            "objectCount": 12,
            "url": None,
            "partialDataUrl": None,
            "isFinished": False,
        }

    @pytest.mark.asyncio
    async def test_no_operation(self):
        client = make_client(lambda request: httpx.Response(200, json={"data": {"currentBulkOperation": None}}))
        try:
            assert await fetch_current_bulk_operation(client) is None
        finally:
            await client.close()
