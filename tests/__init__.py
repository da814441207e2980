"""
Storefront test suite.
"""
