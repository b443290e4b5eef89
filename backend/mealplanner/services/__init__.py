"""
Meal Planner Backend - Services Layer
=====================================

What:  The request handlers' logic, independent of HTTP.

Service Inventory:
    - LLMService (abstract): interface for text-generation providers
    - GeminiService: Google Gemini implementation
    - GenerationService: prompt construction + generation (Generation Handler)
    - FavoriteService: `favorites` collection (Favorites Store)
    - CookbookService: blob + `cookbooks` record writes (Cookbook Store)
    - BlobStore / LocalBlobStore: object storage for uploaded files
"""
