# database/db_manager.py
from __future__ import annotations

import os
import logging
import uuid
from datetime import datetime

from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import ForeignKey
from sqlalchemy.engine import make_url
from sqlalchemy.orm import relationship
from werkzeug.security import check_password_hash, generate_password_hash

# Initialize the SQLAlchemy object
db = SQLAlchemy()
logger = logging.getLogger(__name__)


def new_object_id() -> str:
    """Opaque record identifier (32 lowercase hex characters)."""
    return uuid.uuid4().hex


def parse_object_id(value) -> str | None:
    """Return the canonical form of ``value`` or None when it is not a valid id."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip()).hex
    except ValueError:
        return None


def _iso(value):
    return value.isoformat() if value else None


class User(UserMixin, db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(120), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)
    is_admin = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    music = relationship("Music", back_populates="owner", lazy=True)

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def get_id(self) -> str:
        return str(self.id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "is_admin": self.is_admin,
            "created_at": _iso(self.created_at),
            "updated_at": _iso(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<User {self.email}>"


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.String(32), primary_key=True, default=new_object_id)
    name = db.Column(db.String(120), unique=True, nullable=False)
    description = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    types = relationship(
        'CategoryType',
        back_populates='category',
        order_by='CategoryType.name',
        cascade='all, delete-orphan',
        lazy='selectin',
    )

    def find_type(self, type_id: str | None):
        if not type_id:
            return None
        return next((t for t in self.types if t.id == type_id), None)

    def summary(self) -> dict:
        return {'_id': self.id, 'name': self.name, 'description': self.description}

    def to_dict(self) -> dict:
        data = self.summary()
        data['types'] = [t.to_dict() for t in self.types]
        data['createdAt'] = _iso(self.created_at)
        return data

    def __repr__(self):
        return f'<Category {self.name}>'


class CategoryType(db.Model):
    __tablename__ = 'category_types'

    id = db.Column(db.String(32), primary_key=True, default=new_object_id)
    category_id = db.Column(
        db.String(32),
        ForeignKey('categories.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=True)

    category = relationship('Category', back_populates='types')

    def to_dict(self) -> dict:
        return {'_id': self.id, 'name': self.name, 'description': self.description}


class Music(db.Model):
    __tablename__ = 'music'

    id = db.Column(db.String(32), primary_key=True, default=new_object_id)
    title = db.Column(db.String(255), nullable=False)
    artist = db.Column(db.String(255), nullable=False)
    # No FK cascade: a deleted category leaves the id behind and resolves to null
    category_id = db.Column(db.String(32), nullable=True, index=True)
    category_type_id = db.Column(db.String(32), nullable=True)
    duration = db.Column(db.Float, nullable=False)
    release_date = db.Column(db.Date, nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    file_url = db.Column(db.String(500), nullable=True)
    thumbnail_url = db.Column(db.String(500), nullable=True)
    user_id = db.Column(db.Integer, ForeignKey('users.id', ondelete='RESTRICT'), nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    owner = relationship('User', back_populates='music')
    category = relationship(
        'Category',
        primaryjoin='foreign(Music.category_id) == Category.id',
        viewonly=True,
        lazy='joined',
    )

    def __repr__(self):
        return f'<Music {self.title} by {self.artist}>'

    def to_dict(self) -> dict:
        """Stored representation; category fields carry raw ids."""
        return {
            '_id': self.id,
            'title': self.title,
            'artist': self.artist,
            'category': self.category_id,
            'categoryType': self.category_type_id,
            'duration': self.duration,
            'releaseDate': _iso(self.release_date),
            'description': self.description,
            'fileUrl': self.file_url,
            'thumbnailUrl': self.thumbnail_url,
            'user': self.user_id,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


def initialize_database(app):
    """
    Initializes the SQLAlchemy extension with the Flask app instance
    and creates all database tables if they don't already exist.
    """
    db.init_app(app)
    # Ensure the instance folder exists for SQLite database file
    instance_path = app.instance_path
    if not os.path.exists(instance_path):
        os.makedirs(instance_path)
        logger.info("Created instance folder: %s", instance_path)

    # Ensure the directory for the configured SQLite file exists
    try:
        uri = app.config.get('SQLALCHEMY_DATABASE_URI')
        if uri:
            url = make_url(uri)
            # Only handle file-based SQLite (not :memory:)
            if url.get_backend_name() == 'sqlite' and url.database and url.database != ':memory:':
                db_dir = os.path.dirname(url.database)
                if db_dir and not os.path.exists(db_dir):
                    os.makedirs(db_dir, exist_ok=True)
                    logger.info("Created SQLite DB directory: %s", db_dir)
    except Exception as e:
        # Don't block app startup on path parsing issues; log and continue
        logger.warning("Could not ensure SQLite directory exists: %s", e)

    with app.app_context():
        db.create_all()
        logger.info("Database tables created or already exist.")
