from sqlalchemy import Column, Integer, String, text
from app.database import Base

# INTEGER bounds shared by SQLite and PostgreSQL
INTEGER_MIN = -2**31
INTEGER_MAX = 2**31 - 1

class Vehicle(Base):
    __tablename__ = "vehicles"

    # (make, model, year) is only an advisory key, checked by the CSV import
    id = Column(Integer, primary_key=True, autoincrement=True, index=True)
    make = Column(String)
    model = Column(String)
    year = Column(Integer)
    count = Column(Integer, nullable=False, default=0, server_default=text("0"))
