"""
Meal Planner Backend - API Routes Package
=========================================

Route Inventory:
    - generate.py:   POST /generate-plan
    - favorites.py:  POST /favorites, GET /favorites
    - cookbooks.py:  POST /upload-cookbook, GET /cookbooks
    - health.py:     GET  /health

Routes stay thin: pull data out of the request, call one service, wrap the
result in the `success` envelope. Failures are raised as MealPlannerError
subclasses and formatted by the global handlers in main.py.
"""
