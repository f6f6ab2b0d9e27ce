"""
Example 01: Basic Query Execution

This example demonstrates text-filtered selects, lookups by id and
scalar/column queries using RowLite's Engine.
"""

from dataclasses import dataclass
from typing import Optional

from row_lite import ConnectionConfig, ConnectionManager, Engine, mapped_field


@dataclass
class User:
    __tablename__ = "users"

    id: int = mapped_field(primary_key=True)
    name: str = ""
    email: str = ""
    active: bool = True
    age: Optional[int] = None


def main():
    manager = ConnectionManager(ConnectionConfig(driver="sqlite", database=":memory:"))
    with manager.get_connection() as conn:
        conn.execute("""
            CREATE TABLE users (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL,
                active INTEGER DEFAULT 1,
                age INTEGER
            )
        """)
        conn.execute("INSERT INTO users (name, email, age) VALUES ('Alice', 'alice@example.com', 31)")
        conn.execute("INSERT INTO users (name, email, age) VALUES ('Bob', 'bob@example.com', 27)")
        conn.execute(
            "INSERT INTO users (name, email, active) VALUES ('Charlie', 'charlie@example.com', 0)"
        )
        conn.commit()

    engine = Engine(manager.dialect)

    print("=== Basic Query Execution ===\n")

    with manager.command() as cmd:
        # select: every row matching a filter
        active = engine.select(cmd, User, "active = {0}", True)
        print(f"select result ({len(active)} rows):")
        for user in active:
            print(f"  - {user.name} ({user.email})")

        # get_by_id / get_by_id_or_default
        print(f"\nget_by_id(1): {engine.get_by_id(cmd, User, 1)}")
        print(f"get_by_id_or_default(99): {engine.get_by_id_or_default(cmd, User, 99)}")

        # each: lazy iteration
        print("\neach (ORDER BY name DESC):")
        for user in engine.each(cmd, User, "ORDER BY name DESC"):
            print(f"  - {user.name}")

        # scalars and columns
        count = engine.get_scalar(cmd, int, "SELECT COUNT(*) FROM users")
        print(f"\nget_scalar count: {count}")
        names = engine.get_first_column(cmd, str, "SELECT name FROM users ORDER BY id")
        print(f"get_first_column: {names}")
        by_active = engine.get_lookup(cmd, bool, str, "SELECT active, name FROM users")
        print(f"get_lookup: {by_active}")
        emails = engine.get_dictionary(cmd, int, str, "SELECT id, email FROM users")
        print(f"get_dictionary: {emails}")

    manager.close()


if __name__ == "__main__":
    main()
