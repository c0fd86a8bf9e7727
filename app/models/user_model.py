from sqlalchemy import Column, String, Text, DateTime, func

from app.core.db import Base

class User(Base):
    __tablename__ = "users"

    # GitHub numeric user id (dạng string), cũng là giá trị của header X-User-Id
    id = Column(String(255), primary_key=True, index=True)
    username = Column(String(255), nullable=False, default="unknown")

    encrypted_token = Column(Text, nullable=True) # Envelope iv:authTag:ciphertext
    token_updated_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<User(id={self.id}, username='{self.username}')>"
