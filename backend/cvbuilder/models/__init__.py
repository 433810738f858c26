from cvbuilder.models.user import User
from cvbuilder.models.cv import CV, CV_LANGUAGES, CV_THEMES
from cvbuilder.models.theme import Theme

__all__ = ["User", "CV", "CV_LANGUAGES", "CV_THEMES", "Theme"]
