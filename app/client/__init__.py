"""
Client package
Python client of the GamerBoy API plus the local bookkeeping a front end
keeps: favorites, recently played games, paging and rating submission.

Usage:
    from client.api_client import ApiClient
    api = ApiClient("http://localhost:8465")
    page = api.get_games(page=1, limit=12)
"""
