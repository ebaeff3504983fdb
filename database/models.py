"""
SQLAlchemy models for the coffee batch registry
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, Date, DateTime, ForeignKey, Text, Boolean
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class CoffeeBatch(Base):
    """Harvest batch tracked from registration through export"""
    __tablename__ = "coffee_batches"

    id = Column(String(36), primary_key=True)  # UUID4
    batch_number = Column(String(20), unique=True, nullable=False, index=True)  # BATCH-XXXXXXXX

    # Harvest registration
    crop_type = Column(String(50), default='coffee', nullable=False)
    variety = Column(String(100))
    process = Column(String(50))  # Washed, Natural, Honey
    initial_weight_kg = Column(Float, nullable=False)
    harvest_date = Column(Date)
    location = Column(String(200))
    gps = Column(String(100))  # "lat, long"
    elevation = Column(String(50))
    farmer_name = Column(String(200), index=True)

    # Lifecycle
    status = Column(String(20), default='harvested', nullable=False, index=True)  # harvested ... exported
    transfer_count = Column(Integer, default=0, nullable=False)  # 0 until the token leaves the minting wallet
    last_tx_hash = Column(String(64))

    # Mint linkage
    is_minted = Column(Boolean, default=False, nullable=False, index=True)
    mint_tx_hash = Column(String(64))
    mint_unit = Column(String(120), unique=True, index=True)  # policy ID + asset name hex
    policy_id = Column(String(56))
    minted_at = Column(DateTime)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    status_updates = relationship(
        "BatchStatusUpdate",
        back_populates="batch",
        order_by="BatchStatusUpdate.id",
        cascade="all, delete-orphan",
    )


class BatchStatusUpdate(Base):
    """One recorded status change, written after the transfer landed on chain"""
    __tablename__ = "batch_status_updates"

    id = Column(Integer, primary_key=True)
    batch_id = Column(String(36), ForeignKey("coffee_batches.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False)
    description = Column(Text)
    note = Column(Text)
    tx_hash = Column(String(64), index=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    batch = relationship("CoffeeBatch", back_populates="status_updates")
