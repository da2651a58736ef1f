"""
Repositories package
Database queries for the catalog, kept apart from the models:
- games_repository.py
- category_repository.py
- rating_repository.py

Usage:
    from repositories.games_repository import GamesRepository
    page = GamesRepository.get_games(search="runner", page=1, limit=12)
"""
