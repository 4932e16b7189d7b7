"""
Shopify GraphQL Admin API client.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ShopifyClientError(Exception):
    """Base exception for Shopify client errors."""
    pass


class ShopifyAuthError(ShopifyClientError):
    """Authentication error."""
    pass


class ShopifyRateLimitError(ShopifyClientError):
    """Rate limit exceeded."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


def normalize_shop_domain(shop_domain: str) -> str:
    """Strip scheme and trailing slash from a shop domain."""
    domain = shop_domain.strip()
    if domain.startswith("https://"):
        domain = domain[8:]
    elif domain.startswith("http://"):
        domain = domain[7:]
    return domain.rstrip("/")


def user_error_messages(payload: Optional[Dict[str, Any]]) -> List[str]:
    """Extract userErrors messages from a mutation payload."""
    if not payload:
        return []
    return [e.get("message", str(e)) for e in payload.get("userErrors") or []]


class ShopifyClient:
    """
    Async HTTP client for the Shopify GraphQL Admin API.

    Handles authentication, throttling and retries on transport errors.
    One instance per request or job run; close it when done.
    """

    DEFAULT_API_VERSION = "2025-01"
    MAX_RETRIES = 5
    BASE_RETRY_DELAY = 1.0  # seconds

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: str = DEFAULT_API_VERSION,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Shopify client.

        Args:
            shop_domain: Store domain (e.g., "mystore.myshopify.com")
            access_token: Admin API access token from the session store
            api_version: Admin API version segment of the endpoint URL
            transport: Optional httpx transport (used by tests)
        """
        domain = normalize_shop_domain(shop_domain)

        self.shop_domain = domain
        self.access_token = access_token
        self.api_version = api_version
        self.graphql_url = f"https://{domain}/admin/api/{api_version}/graphql.json"

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0, connect=10.0),
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                },
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL query/mutation with retry logic.

        Args:
            query: GraphQL query or mutation string
            variables: Optional variables for the query

        Returns:
            The 'data' portion of the GraphQL response

        Raises:
            ShopifyAuthError: If authentication fails
            ShopifyRateLimitError: If rate limit exceeded after retries
            ShopifyClientError: For other errors
        """
        client = await self._get_client()
        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            try:
                response = await client.post(self.graphql_url, json=payload)

                if response.status_code == 401:
                    raise ShopifyAuthError(
                        f"Authentication failed for {self.shop_domain}"
                    )

                if response.status_code == 429:
                    retry_after = float(
                        response.headers.get("Retry-After", self.BASE_RETRY_DELAY)
                    )
                    raise ShopifyRateLimitError(
                        "Rate limit exceeded", retry_after=retry_after
                    )

                response.raise_for_status()

                result = response.json()

                if result.get("errors"):
                    error_messages = [
                        e.get("message", str(e)) for e in result["errors"]
                    ]

                    if any("throttl" in msg.lower() for msg in error_messages):
                        raise ShopifyRateLimitError(
                            f"GraphQL throttled: {error_messages}"
                        )

                    raise ShopifyClientError(f"GraphQL errors: {error_messages}")

                cost = (result.get("extensions") or {}).get("cost")
                if cost:
                    available = cost.get("throttleStatus", {}).get("currentlyAvailable", 0)
                    if available < 100:
                        logger.warning(f"Low rate limit points: {available} available")

                return result.get("data") or {}

            except ShopifyAuthError:
                raise

            except ShopifyRateLimitError as e:
                last_error = e
                delay = e.retry_after or (self.BASE_RETRY_DELAY * (2 ** attempt))
                logger.warning(
                    f"Rate limited, waiting {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.MAX_RETRIES})"
                )
                await asyncio.sleep(delay)

            except httpx.RequestError as e:
                last_error = ShopifyClientError(f"Request error: {e}")
                delay = self.BASE_RETRY_DELAY * (2 ** attempt)
                logger.warning(f"Request error, retrying in {delay:.1f}s: {e}")
                await asyncio.sleep(delay)

            except ShopifyClientError:
                raise

            except Exception as e:
                logger.error(f"Unexpected error from {self.shop_domain}: {e}")
                raise ShopifyClientError(f"Unexpected error: {e}") from e

        raise last_error or ShopifyClientError("Max retries exceeded")

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
