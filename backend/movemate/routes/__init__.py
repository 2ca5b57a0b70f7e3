"""
MoveMate Backend — API Routes Package
======================================

Route Inventory:
    - driver_requests.py:  /api/requests/driver/...  (listings and decisions)
    - health.py:           GET /health

Routes are thin: parse the request, call the service, return the model.
Business rules live in movemate.services.
"""
