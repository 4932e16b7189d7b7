"""
Shared test doubles: an in-memory stand-in for the Shopify GraphQL client
and catalog builders.
"""

from typing import Any, Callable, Dict, List, Optional, Tuple


SHOP = "test-shop.myshopify.com"
LOCATION_ID = "gid://shopify/Location/1"


class FakeShopify:
    """
    Records every execute() call and answers through a handler.

    The handler receives (query, variables) and returns the 'data' dict,
    or an exception instance to raise.
    """

    def __init__(self, handler: Callable[[str, Dict[str, Any]], Any]):
        self.handler = handler
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.closed = False

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        variables = variables or {}
        self.calls.append((query, variables))
        result = self.handler(query, variables)
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True

    def calls_to(self, operation: str) -> List[Dict[str, Any]]:
        """Variables of every call whose query mentions ``operation``."""
        return [variables for query, variables in self.calls if operation in query]


def product_id(n: int) -> str:
    return f"gid://shopify/Product/{n}"


def summary_node(n: int, **overrides) -> Dict[str, Any]:
    node = {
        "id": product_id(n),
        "title": f"Product {n}",
        "productType": "Shoes",
        "vendor": "Acme",
        "tags": ["sale"],
        "featuredImage": {"url": f"https://cdn.example.com/{n}.jpg"},
    }
    node.update(overrides)
    return node


def paginate(nodes: List[Dict[str, Any]], first: int, cursor: Optional[str]) -> Dict[str, Any]:
    """Connection payload with integer-offset cursors."""
    start = int(cursor) if cursor else 0
    chunk = nodes[start:start + first]
    end = start + len(chunk)
    return {
        "edges": [{"cursor": str(start + i + 1), "node": node} for i, node in enumerate(chunk)],
        "pageInfo": {"hasNextPage": end < len(nodes), "endCursor": str(end) if chunk else None},
    }


def editable_node(
    n: int,
    variants: Optional[List[Dict[str, Any]]] = None,
    **overrides,
) -> Dict[str, Any]:
    if variants is None:
        variants = [variant_node(n, 0)]
    node = {
        "id": product_id(n),
        "title": f"Product {n}",
        "descriptionHtml": f"<p>Product {n}</p>",
        "vendor": "Acme",
        "productType": "Shoes",
        "tags": ["red", "summer"],
        "featuredImage": {"url": f"https://cdn.example.com/{n}.jpg", "altText": None},
        "variants": {"edges": [{"node": v} for v in variants]},
    }
    node.update(overrides)
    return node


def variant_node(n: int, v: int, price: str = "10.00", compare_at: Optional[str] = None,
                 quantity: Optional[int] = 15) -> Dict[str, Any]:
    level = None
    if quantity is not None:
        level = {"quantities": [{"name": "available", "quantity": quantity}]}
    return {
        "id": f"gid://shopify/ProductVariant/{n}{v}",
        "title": "Default Title",
        "price": price,
        "compareAtPrice": compare_at,
        "inventoryItem": {
            "id": f"gid://shopify/InventoryItem/{n}{v}",
            "inventoryLevel": level,
        },
    }


def mutation_ok(key: str) -> Dict[str, Any]:
    return {key: {"userErrors": []}}


