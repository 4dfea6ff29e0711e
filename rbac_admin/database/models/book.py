from sqlalchemy import Column, Integer, String, Text, Float, DateTime, func
from ..database import Base

BOOK_STATUSES = ("AVAILABLE", "BORROWED", "MAINTENANCE")

class Book(Base):
    """
    관리 대상 리소스인 도서를 나타냅니다.
    status는 'AVAILABLE', 'BORROWED', 'MAINTENANCE' 중 하나입니다.
    """
    __tablename__ = "books"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    author = Column(String(255), nullable=False, index=True)
    isbn = Column(String(17), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=False, default=0)
    status = Column(String(20), nullable=False, default="AVAILABLE")
    published_at = Column(String(32), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
