"""ShopSense: in-app shopping personalization engine.

This package provides a behavior-driven recommendation and shopping assistant
engine, plus a thin HTTP shell around it.

Modules:
    api: FastAPI application and REST API endpoints
    personalization: behavior tracking, scoring, intent routing and history
"""

__version__ = "0.1.0"
