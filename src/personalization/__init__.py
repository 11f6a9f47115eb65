"""Personalization engine for ShopSense.

This package contains the in-process engine that tracks shopper behavior,
scores catalog products into recommendations, and routes free-text shopping
questions to canned replies. It has no web dependencies; the FastAPI shell in
``src.api`` wraps it.
"""
