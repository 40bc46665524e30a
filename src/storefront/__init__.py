"""Storefront: catalogue, carts, coupons, checkout and order management."""
