"""ORM models, one per document store collection."""
