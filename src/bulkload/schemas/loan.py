"""
Table definition for the loan default dataset.

A single table keyed by the loan identifier. Yes/No flags are kept as text,
exactly as they appear in the source file.
"""

from sqlalchemy import Column, Integer, MetaData, Numeric, SmallInteger, String, Table

from bulkload.schemas.types import tinyint_column

metadata = MetaData()

loan_default = Table(
    "loan_default",
    metadata,
    Column("loan_id", String(50), primary_key=True),
    Column("age", SmallInteger),
    Column("income", Integer),
    Column("loan_amount", Integer),
    Column("credit_score", SmallInteger),
    Column("months_employed", SmallInteger),
    Column("num_credit_lines", SmallInteger),
    Column("interest_rate", Numeric(5, 2)),
    Column("loan_term", SmallInteger),
    Column("dti_ratio", Numeric(4, 2)),
    Column("education", String(50)),
    Column("employment_type", String(50)),
    Column("marital_status", String(50)),
    Column("has_mortgage", String(10)),
    Column("has_dependents", String(10)),
    Column("loan_purpose", String(50)),
    Column("has_cosigner", String(10)),
    tinyint_column("is_default"),
)

DATASETS: list[tuple[str, str]] = [
    ("loan_default", "Loan_default.csv"),
]

DELIMITER = ","
