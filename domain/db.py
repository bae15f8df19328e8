from databases import Database

from domain.models import User


GET_USER = """
SELECT id, email, name FROM users WHERE id = :id AND deleted_at IS NULL
"""


class MissingDatabaseUrl(Exception):
    pass


def get_database(url: str | None) -> Database:
    if not url:
        raise MissingDatabaseUrl("POSTGRES_URL is not set")
    return Database(url)


class UsersRepository:
    """Users repository."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def get(self, id: int) -> User | None:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_USER, values={"id": id}
        )
        if result is None:
            return None
        return User(id=result["id"], email=result["email"], name=result["name"])
