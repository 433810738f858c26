from sqlalchemy import Column, String, Text, Boolean, JSON, DateTime
from sqlalchemy.sql import func
from cvbuilder.database import Base
import uuid


class Theme(Base):
    """
    Visual theme applied when rendering CV PDFs.

    Only one theme may carry is_default=True; the API clears the flag on
    the others when a new default is saved.
    """

    __tablename__ = "themes"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), nullable=False, unique=True, index=True)
    display_name = Column(String(100), nullable=False)
    description = Column(Text, nullable=False, default="")
    colors = Column(JSON, nullable=False, default=dict)
    typography = Column(JSON, nullable=False, default=dict)
    spacing = Column(JSON, nullable=False, default=dict)
    font_sizes = Column(JSON, nullable=False, default=dict)
    use_case = Column(String(20), nullable=True)
    border_style = Column(String(10), nullable=False, default="solid")
    is_default = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
