import unittest

import yaml

from dump_schema import dump_document, parse_enum_values, table_spec
from mockdb import MockDB
from schemasync.config import parse_schema
from schemasync.diff import diff_table
from schemasync.introspect import Introspector, LiveColumn, LiveIndex, LiveTable
from schemasync.mysql import MySQL
from schemasync.postgres import Postgres


def live_column(dialect, name: str, raw: str, nullable: bool = False) -> LiveColumn:
    return LiveColumn(name=name, raw_type=raw, type_class=dialect.type_class(raw), nullable=nullable, has_default=False)


class TestDumpSchema(unittest.TestCase):
    def setUp(self) -> None:
        pg = Postgres()
        self.live = LiveTable(
            name="users",
            columns=[
                live_column(pg, "id", "bigint"),
                live_column(pg, "email", "character varying"),
                live_column(pg, "bio", "text", nullable=True),
                live_column(pg, "doc", "jsonb", nullable=True),
            ],
            indexes=[
                LiveIndex(name="users_pkey", columns=["id"], primary=True, unique=True),
                LiveIndex(name="users_email_key", columns=["email"], primary=False, unique=True),
            ],
        )

    def test_table_spec(self) -> None:
        spec = table_spec("postgres", self.live)
        self.assertEqual(spec["primary_key"], ["id"])
        by_name = {c["name"]: c for c in spec["columns"]}
        self.assertEqual(by_name["id"]["type"], "int")
        self.assertTrue(by_name["id"]["increment"])
        self.assertTrue(by_name["email"]["unique"])
        self.assertNotIn("nullable", by_name["email"])
        self.assertTrue(by_name["bio"]["nullable"])
        self.assertEqual(by_name["doc"]["schema_type"], {"postgres": "jsonb"})

    def test_dumped_document_reconciles_to_nothing(self) -> None:
        doc = yaml.safe_load(dump_document("postgres", [self.live]))
        config = parse_schema(doc)
        self.assertEqual(config.dialect, "postgres")
        change = diff_table(Postgres(), config.tables[0], self.live, drop_column=True, drop_index=True)
        self.assertFalse(change.has_changes())

    def test_user_defined_and_array_columns_dump_resolved_names(self) -> None:
        pg = Postgres()
        db = MockDB("postgres")
        db.expect_begin()
        db.expect_query(
            Postgres.columns_query,
            args=("users",),
            rows=[
                ("id", "bigint", "NO", None, "int8"),
                ("email", "USER-DEFINED", "NO", None, "citext"),
                ("scores", "ARRAY", "YES", None, "_int4"),
            ],
        )
        db.expect_query(Postgres.indexes_query, args=("users",), rows=[("users_pkey", "id", "t", "t", 0)])
        live = Introspector(db.begin(), pg).table("users")
        db.assert_done()

        doc = yaml.safe_load(dump_document("postgres", [live]))
        columns = {c["name"]: c for c in doc["tables"][0]["columns"]}
        self.assertEqual(columns["email"]["schema_type"], {"postgres": "citext"})
        self.assertEqual(columns["scores"]["schema_type"], {"postgres": "int4[]"})
        config = parse_schema(doc)
        change = diff_table(pg, config.tables[0], live, drop_column=True, drop_index=True)
        self.assertFalse(change.has_changes())

    def test_mysql_enum_columns_keep_their_values(self) -> None:
        my = MySQL()
        live = LiveTable(
            name="t",
            columns=[live_column(my, "id", "bigint"), live_column(my, "state", "enum('on','it''s')")],
            indexes=[LiveIndex(name="PRIMARY", columns=["id"], primary=True, unique=True)],
        )
        state = table_spec("mysql", live)["columns"][1]
        self.assertEqual(state["type"], "enum")
        self.assertEqual(state["enums"], ["on", "it's"])

    def test_parse_enum_values(self) -> None:
        self.assertEqual(parse_enum_values("enum('a','b')"), ["a", "b"])
        self.assertEqual(parse_enum_values("varchar(10)"), [])


if __name__ == "__main__":
    unittest.main()
