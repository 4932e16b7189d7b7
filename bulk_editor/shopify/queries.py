"""
GraphQL query strings for Shopify Admin API.
"""


# Tag indexing walk: tags only, default ordering
PRODUCT_TAGS_PAGE_QUERY = '''
query productTags($first: Int!, $cursor: String) {
  products(first: $first, after: $cursor) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        tags
      }
    }
  }
}
'''

_PRODUCT_SUMMARY_FIELDS = '''
        id
        title
        productType
        vendor
        tags
        featuredImage {
          url
        }
'''

PRODUCTS_PAGE_QUERY = '''
query productsPage($first: Int!, $cursor: String, $searchQuery: String) {
  products(first: $first, after: $cursor, query: $searchQuery) {
    edges {
      cursor
      node {%s      }
    }
    pageInfo {
      hasNextPage
      endCursor
    }
  }
}
''' % _PRODUCT_SUMMARY_FIELDS

COLLECTION_PRODUCTS_PAGE_QUERY = '''
query collectionProductsPage($collectionId: ID!, $first: Int!, $cursor: String) {
  collection(id: $collectionId) {
    products(first: $first, after: $cursor) {
      edges {
        cursor
        node {%s        }
      }
      pageInfo {
        hasNextPage
        endCursor
      }
    }
  }
}
''' % _PRODUCT_SUMMARY_FIELDS

# Filter choice lists for the listing page
FILTER_FACETS_QUERY = '''
query filterFacets {
  productTypes(first: 100) {
    edges { node }
  }
  productVendors(first: 100) {
    edges { node }
  }
  collections(first: 100, query: "collection_type:smart OR collection_type:custom") {
    edges {
      node {
        id
        title
      }
    }
  }
}
'''

# Post-save confirmation summary
EDITED_PRODUCTS_QUERY = '''
query editedProducts($ids: [ID!]!) {
  nodes(ids: $ids) {
    ... on Product {
      id
      title
      featuredImage {
        url
        altText
      }
    }
  }
}
'''

FIRST_LOCATION_QUERY = '''
query firstLocation {
  locations(first: 1) {
    edges {
      node {
        id
      }
    }
  }
}
'''

EDITABLE_PRODUCTS_QUERY = '''
query editableProducts($ids: [ID!]!, $locationId: ID!) {
  nodes(ids: $ids) {
    ... on Product {
      id
      title
      descriptionHtml
      vendor
      productType
      tags
      featuredImage {
        url
        altText
      }
      variants(first: 50) {
        edges {
          node {
            id
            title
            price
            compareAtPrice
            inventoryItem {
              id
              inventoryLevel(locationId: $locationId) {
                quantities(names: ["available"]) {
                  name
                  quantity
                }
              }
            }
          }
        }
      }
    }
  }
}
'''

CURRENT_BULK_OPERATION_QUERY = '''
query {
  currentBulkOperation {
    id
    status
    errorCode
    objectCount
    url
    partialDataUrl
  }
}
'''
