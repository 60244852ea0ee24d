"""
Database Connection and Session Management

This module handles the prediction store behind the data service and
provides session management for the FastAPI application.

Features:
- SQLAlchemy ORM table for prediction records
- SQLite by default, any SQLAlchemy URL via DATABASE_URL
- Health checking
- Automatic table creation
"""

import os
import logging
from datetime import datetime
from typing import Optional, Dict, Any, List
from contextlib import contextmanager

from sqlalchemy import create_engine, text, select, func, Column, Float, String, Integer, DateTime
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

# =========================================
# Database Configuration
# =========================================

def get_database_url() -> str:
    """Get database URL from environment."""
    return os.getenv("DATABASE_URL", "sqlite:///./predictions.db")


def _engine_kwargs(url: str) -> Dict[str, Any]:
    if url.startswith("sqlite"):
        # FastAPI serves requests from a threadpool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_size": 5, "max_overflow": 10, "pool_pre_ping": True}


engine = create_engine(
    get_database_url(),
    echo=os.getenv("SQL_ECHO", "false").lower() == "true",
    **_engine_kwargs(get_database_url())
)

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for ORM models
Base = declarative_base()


class PredictionRow(Base):
    """One model prediction as stored by the data service."""
    __tablename__ = "predictions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    equipment = Column(String(100), nullable=False, index=True)
    prediction = Column(Integer, nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    vibration = Column(Float, nullable=False)
    temperature = Column(Float, nullable=False)
    noise_frequency = Column(Float, nullable=False)
    machine = Column(String(50), nullable=True)
    good_count = Column(Integer, nullable=True)
    cycle_time = Column(Float, nullable=True)
    performance = Column(Float, nullable=True)
    oee = Column(Float, nullable=True)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire format used in the data envelope."""
        data = {
            "equipment": self.equipment,
            "prediction": self.prediction,
            "timestamp": self.timestamp.isoformat(),
            "vibration": self.vibration,
            "temperature": self.temperature,
            "noise_frequency": self.noise_frequency,
        }
        for optional in ("machine", "good_count", "cycle_time", "performance", "oee"):
            value = getattr(self, optional)
            if value is not None:
                data[optional] = value
        return data


# =========================================
# Dependency for FastAPI
# =========================================

def get_db():
    """
    Dependency that provides a database session.

    Usage in FastAPI:
        @app.get("/items")
        def get_items(db: Session = Depends(get_db)):
            return db.query(Item).all()
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as db:
            db.execute(query)
    """
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


# =========================================
# Database Operations
# =========================================

class DatabaseManager:
    """
    Manager class for prediction store operations.

    Provides high-level methods used by the API endpoints.
    """

    def __init__(self, session: Optional[Session] = None):
        """
        Initialize with optional session.

        Args:
            session: SQLAlchemy session (creates new if None)
        """
        self._session = session
        self._owns_session = session is None

    @property
    def session(self) -> Session:
        """Get or create session."""
        if self._session is None:
            self._session = SessionLocal()
        return self._session

    def close(self):
        """Close session if we own it."""
        if self._owns_session and self._session:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.session.rollback()
        self.close()

    # =========================================
    # Prediction Operations
    # =========================================

    def insert_predictions(self, predictions: List[Dict[str, Any]]) -> int:
        """
        Insert prediction records.

        Args:
            predictions: Validated prediction dictionaries

        Returns:
            Number of rows inserted
        """
        try:
            rows = [PredictionRow(**prediction) for prediction in predictions]
            self.session.add_all(rows)
            self.session.commit()
            return len(rows)
        except SQLAlchemyError as e:
            logger.error(f"Failed to insert predictions: {e}")
            self.session.rollback()
            raise

    def get_recent_predictions(
        self,
        limit: int = 1000,
        since: Optional[datetime] = None,
        equipment: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """
        Get the most recent predictions, returned oldest first.

        Args:
            limit: Maximum rows to return
            since: Only rows at or after this time
            equipment: Only rows for this equipment identifier
        """
        query = select(PredictionRow)
        if since is not None:
            query = query.where(PredictionRow.timestamp >= since)
        if equipment is not None:
            query = query.where(PredictionRow.equipment == equipment)
        query = query.order_by(PredictionRow.timestamp.desc(), PredictionRow.id.desc()).limit(limit)

        try:
            rows = self.session.execute(query).scalars().all()
        except SQLAlchemyError as e:
            logger.error(f"Failed to get predictions: {e}")
            raise
        return [row.to_dict() for row in reversed(rows)]

    def delete_all_predictions(self) -> int:
        """Delete every stored prediction. Returns rows deleted."""
        try:
            deleted = self.session.query(PredictionRow).delete()
            self.session.commit()
            return deleted
        except SQLAlchemyError as e:
            logger.error(f"Failed to delete predictions: {e}")
            self.session.rollback()
            return 0


# =========================================
# Utility Functions
# =========================================

def check_database_health() -> Dict[str, Any]:
    """
    Check database health and return status.

    Returns:
        Dictionary with health status information
    """
    try:
        with get_db_session() as db:
            db.execute(text("SELECT 1"))
            count = db.execute(select(func.count(PredictionRow.id))).scalar() or 0
            return {
                "status": "healthy",
                "connected": True,
                "prediction_count": count,
            }
    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "status": "unhealthy",
            "connected": False,
            "error": str(e)
        }


def init_database():
    """
    Create tables if they don't exist.

    Called on application startup so the schema is ready.
    """
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified")
    except SQLAlchemyError as e:
        logger.error(f"Database initialization failed: {e}")
        raise
