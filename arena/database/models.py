from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Boolean, Text, Numeric,
    ForeignKey, BigInteger, UniqueConstraint, CheckConstraint, Index
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func, true

Base = declarative_base()

class Player(Base):
    __tablename__ = 'players'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    discord_id = Column(BigInteger, unique=True, nullable=True, index=True)

    # Remote players earn double attendance points
    remote = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    attendance = relationship("Attendance", back_populates="player")

    def __repr__(self):
        return f"<Player(id={self.id}, name='{self.name}', remote={self.remote})>"

class Cycle(Base):
    __tablename__ = 'cycles'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('end_date >= start_date', name='ck_cycle_dates'),
    )

    def __repr__(self):
        return f"<Cycle(name='{self.name}', active={self.is_active})>"

class Attendance(Base):
    __tablename__ = 'attendance'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    check_in_date = Column(Date, nullable=False)
    is_early_bird = Column(Boolean, default=False, nullable=False)
    recorded_by = Column(String(100), nullable=True)  # 'self' or the admin's name

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player", back_populates="attendance")

    __table_args__ = (
        UniqueConstraint('player_id', 'check_in_date', name='uq_attendance_player_date'),
    )

    def __repr__(self):
        return f"<Attendance(player_id={self.player_id}, date={self.check_in_date}, early={self.is_early_bird})>"

class Course(Base):
    __tablename__ = 'courses'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    course_url = Column(Text, nullable=True)
    total_hours = Column(Numeric(5, 2), nullable=False)
    completion_percent = Column(Integer, nullable=False)
    notes_link = Column(Text, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")

    __table_args__ = (
        CheckConstraint('completion_percent >= 0 AND completion_percent <= 100', name='ck_course_completion'),
    )

class BookCatalogEntry(Base):
    __tablename__ = 'books_library'

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    author = Column(String(255), nullable=True)
    category = Column(String(100), nullable=True)
    points_per_10_pages = Column(Integer, default=1, nullable=False)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<BookCatalogEntry(name='{self.name}', pts_per_10={self.points_per_10_pages})>"

class Book(Base):
    __tablename__ = 'books'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    catalog_id = Column(Integer, ForeignKey('books_library.id', ondelete='SET NULL'), nullable=True)
    title = Column(String(255), nullable=False)
    pages_read = Column(Integer, default=0, nullable=False)
    points_per_10_pages = Column(Integer, default=1, nullable=False)  # Copied from the catalog at submission
    notes_link = Column(Text, nullable=True)
    verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")
    catalog_entry = relationship("BookCatalogEntry")

    __table_args__ = (
        CheckConstraint('pages_read >= 0', name='ck_book_pages'),
    )

class Blog(Base):
    __tablename__ = 'blogs'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    url = Column(Text, nullable=False, unique=True)  # No two players may submit the same link
    is_first = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")

class Presentation(Base):
    __tablename__ = 'presentations'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    second_presenter_id = Column(Integer, ForeignKey('players.id', ondelete='SET NULL'), nullable=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    topic = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    slides_url = Column(Text, nullable=True)
    recording_url = Column(Text, nullable=True)
    is_solo = Column(Boolean, default=True, nullable=False)
    presentation_order = Column(Integer, default=1, nullable=False)
    points = Column(Integer, nullable=False)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player", foreign_keys=[player_id])
    second_presenter = relationship("Player", foreign_keys=[second_presenter_id])

    __table_args__ = (
        CheckConstraint('presentation_order IN (1, 2)', name='ck_presentation_order'),
    )

class Activity(Base):
    __tablename__ = 'activities'

    id = Column(Integer, primary_key=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    activity_type = Column(String(50), nullable=False)
    date = Column(Date, nullable=False)

    created_at = Column(DateTime, default=func.now())

    participations = relationship("ActivityParticipation", back_populates="activity", cascade="all, delete-orphan")

class ActivityParticipation(Base):
    __tablename__ = 'activity_participations'

    id = Column(Integer, primary_key=True)
    activity_id = Column(Integer, ForeignKey('activities.id', ondelete='CASCADE'), nullable=False)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    is_top_performer = Column(Boolean, default=False, nullable=False)
    double_points_used = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    activity = relationship("Activity", back_populates="participations")
    player = relationship("Player")

    __table_args__ = (
        UniqueConstraint('activity_id', 'player_id', name='uq_participation_activity_player'),
        # One double points use per player per cycle
        Index(
            'uq_double_points_per_cycle', 'player_id', 'cycle_id',
            unique=True,
            sqlite_where=double_points_used == true(),
            postgresql_where=double_points_used == true(),
        ),
    )

class Idea(Base):
    __tablename__ = 'ideas'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    idea_type = Column(String(20), default='idea', nullable=False)
    points = Column(Integer, default=0, nullable=False)  # Set by an admin on verification
    verified = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")

class Penalty(Base):
    __tablename__ = 'penalties'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    reason = Column(String(50), default='other', nullable=False)
    points = Column(Integer, nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")

    __table_args__ = (
        CheckConstraint('points <= 0', name='ck_penalty_points'),
    )

class BonusAward(Base):
    __tablename__ = 'bonus_awards'

    id = Column(Integer, primary_key=True)
    player_id = Column(Integer, ForeignKey('players.id'), nullable=False, index=True)
    cycle_id = Column(Integer, ForeignKey('cycles.id', ondelete='CASCADE'), nullable=False, index=True)
    kind = Column(String(20), default='top_performer', nullable=False)  # top_performer, streak, champion
    points = Column(Integer, nullable=False)
    reason = Column(Text, nullable=True)
    awarded_by = Column(String(100), nullable=True)

    created_at = Column(DateTime, default=func.now())

    player = relationship("Player")

    __table_args__ = (
        CheckConstraint('points > 0', name='ck_bonus_points'),
    )

    def __repr__(self):
        return f"<BonusAward(player_id={self.player_id}, kind='{self.kind}', points={self.points})>"
