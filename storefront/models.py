from . import db


class DeviceValue(db.Model):
    """Scoped key-value row backing the device storage (cart, customer token)."""
    __tablename__ = "device_value"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(150), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)
