"""Source-specific adapter implementations.

Each adapter module implements a class that inherits from BaseAdapter and
declares its source_id, name, base_url, source_type and domains.
"""

# Scanlators
from .asurascan import AsuraScanAdapter
from .madarascans import MadarascansAdapter
from .kenscans import KenscansAdapter
from .hadesscans import HadesScansAdapter
from .lagoonscans import LagoonScansAdapter

# Aggregators
from .mangakatana import MangaKatanaAdapter
from .novelcool import NovelCoolAdapter
from .mgeko import MgekoAdapter
from .webtoon import WebtoonAdapter
from .atsumoe import AtsuMoeAdapter

__all__ = [
    # Scanlators
    "AsuraScanAdapter",
    "MadarascansAdapter",
    "KenscansAdapter",
    "HadesScansAdapter",
    "LagoonScansAdapter",
    # Aggregators
    "MangaKatanaAdapter",
    "NovelCoolAdapter",
    "MgekoAdapter",
    "WebtoonAdapter",
    "AtsuMoeAdapter",
]
