# Alembic の autogenerate / env.py から参照するためのモデル集約
from domain.models.song import Song, Verse, EnrichmentResult
