import unittest

from schemasync.dialect import get_dialect, shorten
from schemasync.mysql import MySQL
from schemasync.postgres import Postgres
from schemasync.schema import Column, FieldType


class TestShorten(unittest.TestCase):
    def test_short_names_are_untouched(self) -> None:
        self.assertEqual(shorten("pets_owner", 63), "pets_owner")
        self.assertEqual(shorten("x" * 63, 63), "x" * 63)

    def test_long_names_are_truncated_with_hash(self) -> None:
        name = "user_spouse" + "_" * 64
        short = shorten(name, 63)
        self.assertEqual(len(short), 63)
        self.assertEqual(short, "user_spouse____________________390ed76f91d3c57cd3516e7690f621dc")

    def test_shortening_is_stable_and_distinct(self) -> None:
        a = "a" * 40 + "_first_foreign_key_on_a_very_long_table"
        b = "a" * 40 + "_second_foreign_key_on_a_very_long_table"
        self.assertEqual(shorten(a, 63), shorten(a, 63))
        self.assertNotEqual(shorten(a, 63), shorten(b, 63))
        self.assertEqual(shorten(a, 63)[:30], shorten(b, 63)[:30])

    def test_mysql_limit(self) -> None:
        self.assertEqual(len(MySQL().shorten("t" * 100)), 64)


class TestPostgresTypes(unittest.TestCase):
    def setUp(self) -> None:
        self.d = Postgres()

    def test_type_mapping(self) -> None:
        cases = [
            (Column(name="a", type=FieldType.INT), "bigint"),
            (Column(name="a", type=FieldType.INT16), "smallint"),
            (Column(name="a", type=FieldType.UINT16), "integer"),
            (Column(name="a", type=FieldType.UINT64), "bigint"),
            (Column(name="a", type=FieldType.FLOAT32), "real"),
            (Column(name="a", type=FieldType.STRING), "varchar"),
            (Column(name="a", type=FieldType.STRING, size=1 << 30), "text"),
            (Column(name="a", type=FieldType.ENUM, enums=["x"]), "varchar"),
            (Column(name="a", type=FieldType.BYTES, size=1 << 30), "bytea"),
            (Column(name="a", type=FieldType.TIME), "timestamp with time zone"),
            (Column(name="a", type=FieldType.JSON), "jsonb"),
            (Column(name="a", type=FieldType.UUID), "uuid"),
        ]
        for column, expected in cases:
            self.assertEqual(self.d.column_type(column), expected, column.type)

    def test_schema_type_override_wins(self) -> None:
        col = Column(name="a", type=FieldType.FLOAT64, schema_type={"postgres": "numeric(5,2)", "mysql": "decimal(5,2)"})
        self.assertEqual(self.d.column_type(col), "numeric(5,2)")
        self.assertEqual(MySQL().column_type(col), "decimal(5,2)")

    def test_type_classes(self) -> None:
        self.assertEqual(self.d.type_class("character varying"), self.d.type_class("character"))
        self.assertEqual(self.d.type_class("bigint"), self.d.type_class("integer"))
        self.assertNotEqual(self.d.type_class("bigint"), self.d.type_class("text"))
        self.assertEqual(self.d.type_class("USER-DEFINED"), "user-defined")
        self.assertEqual(self.d.type_class("int[]"), self.d.type_class("int4[]"))
        self.assertEqual(self.d.type_class("varchar(32)[]"), "string[]")
        self.assertNotEqual(self.d.type_class("int[]"), self.d.type_class("int"))

    def test_columns_query_shape(self) -> None:
        q = self.d.columns_query
        self.assertTrue(q.startswith('SELECT "column_name", "data_type", "is_nullable", "column_default", "udt_name" '))
        self.assertTrue(q.endswith('ORDER BY "ordinal_position"'))

    def test_live_type_resolves_udt_name(self) -> None:
        self.assertEqual(self.d.live_type("USER-DEFINED", "citext"), "citext")
        self.assertEqual(self.d.live_type("ARRAY", "_int4"), "int4[]")
        self.assertEqual(self.d.live_type("bigint", "int8"), "bigint")
        self.assertEqual(self.d.live_type("USER-DEFINED"), "USER-DEFINED")
        self.assertEqual(MySQL().live_type("varchar(255)"), "varchar(255)")

    def test_versions(self) -> None:
        self.assertTrue(self.d.supports_version("120000"))
        self.assertTrue(self.d.supports_version("100000"))
        self.assertFalse(self.d.supports_version("90000"))
        self.assertFalse(self.d.supports_version("12.1"))

    def test_default_literals(self) -> None:
        self.assertEqual(self.d.default_literal("it's"), "'it''s'")
        self.assertEqual(self.d.default_literal(False), "false")
        self.assertEqual(self.d.default_literal(0), "0")

    def test_restart_identity_floor(self) -> None:
        self.assertEqual(self.d.restart_identity("t", "id", 0), 'ALTER TABLE "t" ALTER COLUMN "id" RESTART WITH 1')

    def test_quote_escapes(self) -> None:
        self.assertEqual(self.d.quote('we"ird'), '"we""ird"')
        self.assertEqual(MySQL().quote("we`ird"), "`we``ird`")


class TestMySQLTypes(unittest.TestCase):
    def test_size_tiers(self) -> None:
        d = MySQL()
        self.assertEqual(d.column_type(Column(name="a", type=FieldType.STRING, size=100)), "varchar(100)")
        self.assertEqual(d.column_type(Column(name="a", type=FieldType.STRING, size=1000)), "text")
        self.assertEqual(d.column_type(Column(name="a", type=FieldType.STRING, size=1 << 30)), "longtext")
        self.assertEqual(d.column_type(Column(name="a", type=FieldType.BYTES)), "blob")
        self.assertEqual(d.column_type(Column(name="a", type=FieldType.BYTES, size=1 << 30)), "longblob")

    def test_enum_values_are_quoted(self) -> None:
        col = Column(name="a", type=FieldType.ENUM, enums=["it's", "b"])
        self.assertEqual(MySQL().column_type(col), "enum('it''s', 'b')")


class TestRegistry(unittest.TestCase):
    def test_get_dialect(self) -> None:
        self.assertIsInstance(get_dialect("postgres"), Postgres)
        self.assertIsInstance(get_dialect("mysql"), MySQL)
        with self.assertRaises(ValueError):
            get_dialect("oracle")


if __name__ == "__main__":
    unittest.main()
