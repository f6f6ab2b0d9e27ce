"""
Example 02: Parameterized Queries and Repositories

This example demonstrates bound-parameter queries, query-by-example and
a Repository subclass over a Pydantic model.
"""

from typing import ClassVar, Optional

from pydantic import BaseModel, Field

from row_lite import ConnectionConfig, ConnectionManager, Engine, Repository


class Product(BaseModel):
    __tablename__: ClassVar[str] = "products"

    id: int = Field(json_schema_extra={"primary_key": True})
    name: str
    category: str
    price: float


class ProductFilter(BaseModel):
    category: Optional[str] = None
    name: Optional[str] = None


class ProductRepository(Repository[Product]):
    def in_category(self, category: str) -> list[Product]:
        return self.engine.query(self.command, self.model, "category", category)

    def cheapest(self) -> Optional[Product]:
        return self.engine.first_or_default(self.command, self.model, "ORDER BY price")


def main():
    manager = ConnectionManager(ConnectionConfig(driver="sqlite", database=":memory:"))
    with manager.get_connection() as conn:
        conn.execute(
            "CREATE TABLE products (id INTEGER PRIMARY KEY, name TEXT, category TEXT, price REAL)"
        )
        conn.executemany(
            "INSERT INTO products (name, category, price) VALUES (?, ?, ?)",
            [("Pen", "office", 1.5), ("Desk", "furniture", 120.0), ("Ink", "office", 4.25)],
        )
        conn.commit()

    engine = Engine(manager.dialect)

    print("=== Parameterized Queries ===\n")

    with manager.command() as cmd:
        products = ProductRepository(engine, cmd, Product)

        # query_by_id reuses the bound statement between calls
        for product_id in (1, 2, 3):
            print(f"find({product_id}): {products.find(product_id)}")
        print(f"  SQL: {cmd.text}")

        print(f"\nin_category('office'): {products.in_category('office')}")
        print(f"by_example: {products.by_example(ProductFilter(category='furniture'))}")
        print(f"cheapest: {products.cheapest()}")

    manager.close()


if __name__ == "__main__":
    main()
