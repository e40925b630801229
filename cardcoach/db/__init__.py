from cardcoach.db.database import Database, get_database
from cardcoach.db.operations import (
    bulk_insert_cards,
    card_to_model,
    create_user,
    delete_cards_by_ids,
    get_user_by_email,
    get_user_by_username,
    insert_set,
    select_set_cards,
    select_set_with_owner,
    select_user_sets,
    upsert_cards,
)

__all__ = [
    "Database",
    "bulk_insert_cards",
    "card_to_model",
    "create_user",
    "delete_cards_by_ids",
    "get_database",
    "get_user_by_email",
    "get_user_by_username",
    "insert_set",
    "select_set_cards",
    "select_set_with_owner",
    "select_user_sets",
    "upsert_cards",
]
