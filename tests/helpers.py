from db_mongo import POTIONS_COL, get_col
from server.src.modules.authentification_helpers import get_credential_service

SAMPLE_POTION = {
    "name": "Elixir of Vigor",
    "vendor_id": "v1",
    "category": "healing",
    "price": 12.5,
    "score": 8,
    "ingredients": ["mandrake root", "troll sweat"],
    "ratings": {"strength": 7, "flavor": 3, "duration": 5, "sideEffects": 1},
}


def session_token(username: str = "tester", user_id: str = "65a000000000000000000001") -> str:
    return get_credential_service().issue_token(user_id, username)


def seed_potions(*docs: dict) -> list[str]:
    res = get_col(POTIONS_COL).insert_many([dict(d) for d in docs])
    return [str(oid) for oid in res.inserted_ids]


async def create_potion(client, payload: dict | None = None) -> dict:
    resp = await client.post("/potions", json=payload or SAMPLE_POTION)
    resp.raise_for_status()
    return resp.json()
