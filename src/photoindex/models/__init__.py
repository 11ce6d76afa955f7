from sqlalchemy.orm import declarative_base

Base = declarative_base()

from .photo import Photo, Active, Archived  # noqa: F401,E402
from .file import File  # noqa: F401,E402
from .album import Album, PhotoAlbum  # noqa: F401,E402
from .label import Label, PhotoLabel  # noqa: F401,E402
from .duplicate import Duplicate  # noqa: F401,E402
from .user import User, Password, Role  # noqa: F401,E402
from .application_lock import ApplicationLock  # noqa: F401,E402
