"""Lookbook storefront backend."""
