"""
GraphQL mutation strings for Shopify Admin API.
"""


PRODUCT_UPDATE = '''
mutation productUpdate($product: ProductUpdateInput!) {
  productUpdate(product: $product) {
    product {
      id
    }
    userErrors {
      field
      message
    }
  }
}
'''

# Variant price fields, one variant per call
PRODUCT_VARIANTS_BULK_UPDATE = '''
mutation productVariantsBulkUpdate($productId: ID!, $variants: [ProductVariantsBulkInput!]!) {
  productVariantsBulkUpdate(productId: $productId, variants: $variants) {
    productVariants {
      id
      price
      compareAtPrice
    }
    userErrors {
      field
      message
    }
  }
}
'''

# All inventory deltas of a submission in one call
INVENTORY_ADJUST_QUANTITIES = '''
mutation inventoryAdjustQuantities($input: InventoryAdjustQuantitiesInput!) {
  inventoryAdjustQuantities(input: $input) {
    inventoryAdjustmentGroup {
      id
    }
    userErrors {
      field
      message
    }
  }
}
'''
