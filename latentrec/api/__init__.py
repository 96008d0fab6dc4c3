"""FastAPI service exposing a latentrec Recommender over HTTP."""
