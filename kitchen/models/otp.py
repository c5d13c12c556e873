"""One-time codes for email verification and password resets."""

from datetime import datetime
from kitchen.extensions import db


class OtpCode(db.Model):
    __tablename__ = 'otp_codes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id', ondelete='CASCADE'),
                        nullable=False, index=True)
    code = db.Column(db.String(10), nullable=False)
    purpose = db.Column(db.String(30), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    is_used = db.Column(db.Boolean, default=False, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, index=True)

    def is_expired(self, now=None):
        return self.expires_at < (now or datetime.utcnow())

    def __repr__(self):
        return f'<OtpCode {self.purpose} user={self.user_id}>'
