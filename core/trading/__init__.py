"""
Vendor-independent trading core: order models, business-rule validation,
error classification, order book normalization and position arithmetic.
"""
