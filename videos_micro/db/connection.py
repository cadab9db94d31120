from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from .database import engine, SessionLocal, Base
from typing import Annotated
import models.video_models  # noqa: F401  registers the videos table on Base


def create_tables():
    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    except SQLAlchemyError:
        db.rollback()
        raise HTTPException(status_code=500, detail="Database connection error")
    finally:
        db.close()


db_dependency = Annotated[Session, Depends(get_db)]
