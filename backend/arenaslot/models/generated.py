from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Index,
    Integer, String, Text, false, text, true,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


ACTIVE_STATUS_SQL = "status IN ('pending', 'confirmed')"


class SystemSettingsRow(Base):
    __tablename__ = 'system_settings'

    id = Column(Integer, primary_key=True)
    opening_time = Column(String(5), nullable=False, server_default=text("'06:00'"))
    closing_time = Column(String(5), nullable=False, server_default=text("'22:00'"))
    is_24_7 = Column(Boolean, nullable=False, server_default=false())
    advance_booking_days = Column(Integer, nullable=False, server_default=text('7'))
    require_admin_approval = Column(Boolean, nullable=False, server_default=true())
    booking_slot_duration = Column(Integer, nullable=False, server_default=text('30'))  # minutes
    min_booking_duration = Column(Float, nullable=False, server_default=text('1.0'))  # hours
    max_booking_duration = Column(Float, nullable=False, server_default=text('4.0'))  # hours
    cancellation_deadline = Column(Float, nullable=False, server_default=text('2'))  # hours
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))


class Games(Base):
    __tablename__ = 'games'
    __table_args__ = (
        CheckConstraint('price_per_hour > 0', name='ck_games_price_positive'),
        CheckConstraint('max_players > 0', name='ck_games_max_players_positive'),
    )

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    description = Column(Text, nullable=False, server_default=text("''"))
    price_per_hour = Column(Float, nullable=False)
    max_players = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    # Deleting a game does not touch its bookings
    bookings = relationship('Bookings', back_populates='game', passive_deletes='all')


class Bookings(Base):
    __tablename__ = 'bookings'
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'canceled', 'no_show', 'completed')",
            name='ck_bookings_status',
        ),
        # Two active bookings of a game can never start at the same minute.
        # The general overlap rule is enforced by BookingStore under a lock.
        Index(
            'uq_bookings_active_start',
            'game_id', 'booking_date', 'start_time',
            unique=True,
            sqlite_where=text(ACTIVE_STATUS_SQL),
            postgresql_where=text(ACTIVE_STATUS_SQL),
        ),
        Index('ix_bookings_game_date', 'game_id', 'booking_date'),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=False, index=True)
    game_id = Column(ForeignKey('games.id'), nullable=False)
    booking_date = Column(Date, nullable=False)
    start_time = Column(String(5), nullable=False)  # "HH:MM"
    end_time = Column(String(5), nullable=False)  # "HH:MM", exclusive; may be < start (overnight)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    total_cost = Column(Integer, nullable=False, server_default=text('0'))
    notes = Column(Text)
    created_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    game = relationship('Games', back_populates='bookings')
    audit_entries = relationship(
        'BookingAuditLog', back_populates='booking', cascade='all, delete-orphan'
    )


class BookingAuditLog(Base):
    __tablename__ = 'booking_audit_log'

    id = Column(Integer, primary_key=True)
    booking_id = Column(ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False, index=True)
    old_status = Column(Text)
    new_status = Column(Text, nullable=False)
    changed_by = Column(Integer)
    notes = Column(Text)
    changed_at = Column(DateTime, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    booking = relationship('Bookings', back_populates='audit_entries')
