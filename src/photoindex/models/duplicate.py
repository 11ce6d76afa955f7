from sqlalchemy import Column, BigInteger, String
from photoindex.models import Base


class Duplicate(Base):
    """A file known to be byte-identical to an indexed file.

    Rows are kept so the file is not hashed again on the next scan; nothing
    deletes them automatically.
    """
    __tablename__ = "duplicates"

    file_root = Column(String(16), primary_key=True, default="/")
    file_name = Column(String(740), primary_key=True)
    file_hash = Column(String(128), nullable=False, default="", index=True)
    file_size = Column(BigInteger, nullable=False, default=0)
    mod_time = Column(BigInteger, nullable=False, default=0)
