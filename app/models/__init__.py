# Package init for app.models
from .base import Base as Base  # explicit re-export
from .countdown import Countdown as Countdown
from .gallery import GalleryItem as GalleryItem
from .gallery import GallerySettings as GallerySettings
from .tour import Tour as Tour
