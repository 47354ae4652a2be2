"""
txman Quickstart Example

This example walks through the two things txman does:

1. Callback-scoped transactions that always commit-or-rollback and release
2. Named and list-valued parameters expanded to positional placeholders
"""

import logging
import os
import tempfile

from txman import SQLiteConnectionSource, TxMan, configure_logging, expand


def record_mapper(row):
    return row["key"], row["value"]


def main():
    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    configure_logging(logging.DEBUG)

    # ==========================================================================
    # Statement Expansion
    # ==========================================================================
    print("=" * 60)
    print("txman Quickstart")
    print("=" * 60)

    expanded = expand(
        "SELECT * FROM record WHERE key IN (:keys) AND value = :value",
        {"value": "abc", "keys": [123, 456]},
    )
    print(f"\nExpanded SQL: {expanded.sql}")
    print(f"Parameters:   {expanded.parameters}")

    with tempfile.TemporaryDirectory() as tmp_dir:
        txman = TxMan(SQLiteConnectionSource(os.path.join(tmp_dir, "quickstart.db")))

        # ======================================================================
        # Commit
        # ======================================================================
        print("\n" + "-" * 40)
        print("Step 1: Insert and commit")
        print("-" * 40)

        def setup(tx):
            tx.update("CREATE TABLE record (key INT PRIMARY KEY, value TEXT NOT NULL)")
            return tx.update(
                "INSERT INTO record (key, value) VALUES (:key, :value)",
                tx.params().put("key", 123).put("value", "abc").build(),
            )

        print(f"Inserted {txman.begin(setup)} row(s)")

        # ======================================================================
        # Rollback
        # ======================================================================
        print("\n" + "-" * 40)
        print("Step 2: Insert and roll back")
        print("-" * 40)

        def discarded(tx):
            tx.update("INSERT INTO record (key, value) VALUES (?, ?)", [456, "def"])
            seen = tx.execute("SELECT * FROM record ORDER BY key", row_mapper=record_mapper)
            tx.set_rollback()
            return seen

        print(f"Inside the transaction: {txman.begin(discarded)}")

        # ======================================================================
        # Read-only
        # ======================================================================
        print("\n" + "-" * 40)
        print("Step 3: Read back")
        print("-" * 40)

        records = txman.begin_read_only(
            lambda tx: tx.execute("SELECT * FROM record ORDER BY key", row_mapper=record_mapper)
        )
        print(f"After rollback: {records}")

        one = txman.begin_read_only(lambda tx: tx.execute_one(
            "SELECT * FROM record WHERE key = :key", {"key": 999}, record_mapper,
        ))
        print(f"Missing key lookup: {one}")


if __name__ == "__main__":
    main()
