# Routes package init
"""
CatRouter - API Routes Package
==============================

Route Inventory:
    - cats.py:    CatRouter route module, mounted at /api/tutorials-router/cats
                  GET  (list cats, always empty)
                  POST (single file upload, richer variant only)
    - health.py:  GET /health (service health check)

Routes are THIN: they pull data out of the request, call a service, and
pick the status code. The upload work lives in services/.
"""
