"""Database models for the game."""
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()

class StorageEntry(db.Model):
    """One key/value pair of the save storage medium."""
    __tablename__ = 'storage_entries'

    key = db.Column(db.String(255), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def size(self):
        """Approximate footprint in bytes (key plus value)."""
        return len(self.key.encode('utf-8')) + len(self.value.encode('utf-8'))

    def to_dict(self):
        """Convert to dictionary."""
        return {
            'key': self.key,
            'size': self.size(),
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
