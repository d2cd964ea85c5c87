"""
Repositories package

Each repository encapsulates database operations for a model:
- user_repository.py
- collection_repository.py
- user_settings_repository.py

Usage:
    from questlog.repositories.collection_repository import CollectionRepository
    entries = CollectionRepository.get_all_by_user(user_id)
"""
