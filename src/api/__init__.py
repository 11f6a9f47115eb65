"""FastAPI application module for ShopSense.

This module contains the HTTP shell around the personalization engine: the
application factory, settings, logging setup and the recommendation and
assistant routers.
"""
