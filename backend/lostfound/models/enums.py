from sqlalchemy import BigInteger, Enum, Integer

# Enum column types shared by the report, match and notification tables.
# native_enum maps to CREATE TYPE on Postgres and to VARCHAR elsewhere.

report_status_enum = Enum("pending", "matched", "closed", name="report_status_enum", create_constraint=False)
match_status_enum = Enum("pending", "confirmed", "rejected", name="match_status_enum", create_constraint=False)
run_status_enum = Enum("running", "succeeded", "failed", name="match_run_status_enum", create_constraint=False)
role_enum = Enum("student", "admin", name="role_enum", create_constraint=False)

# SQLite only autoincrements INTEGER PRIMARY KEY columns
BigIntPK = BigInteger().with_variant(Integer(), "sqlite")
