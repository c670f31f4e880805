from sqlalchemy import BigInteger, Integer

# Day populations exceed 32 bits; SQLite integers are always 64-bit.
BIG_INT = BigInteger().with_variant(Integer, "sqlite")
