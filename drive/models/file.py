# drive/models/file.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, String

from drive.models.database import Base


class FileMeta(Base):
    __tablename__ = "files"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    original_name = Column(String, nullable=False)   # Name user uploaded
    stored_name = Column(String, nullable=False)     # Name we store on disk
    mime_type = Column(String, nullable=False)       # As declared by the client
    path = Column(String, nullable=False)            # Full path on disk
    size = Column(BigInteger, nullable=False)        # Size in bytes
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    # Many files -> one owner; the user row keeps no list of its files
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
