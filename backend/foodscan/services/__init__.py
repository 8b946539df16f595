"""
Services Module
Business logic layer for the application.

Services contain the product pipeline, its heuristics and the product store.
They are called by API endpoints and keep the controllers thin.
"""
