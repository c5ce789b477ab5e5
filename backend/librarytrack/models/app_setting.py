"""
Paramètres modifiables depuis la console d'administration (clé/valeur).
Une valeur en base prime sur la variable d'environnement correspondante.
"""

from sqlalchemy import Column, DateTime, String, Text, func

from librarytrack.database import Base


class AppSetting(Base):
    __tablename__ = "app_settings"

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
