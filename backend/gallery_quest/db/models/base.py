from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


# Import all model modules so Base.metadata is complete for create_all().
from gallery_quest.db.models import cache_entries as _cache_entries  # noqa: F401,E402
from gallery_quest.db.models import gallery_versions as _gallery_versions  # noqa: F401,E402
from gallery_quest.db.models import image_tags as _image_tags  # noqa: F401,E402
from gallery_quest.db.models import images as _images  # noqa: F401,E402
from gallery_quest.db.models import posts as _posts  # noqa: F401,E402
from gallery_quest.db.models import tags as _tags  # noqa: F401,E402
