# genrepo/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # public errors (RepositoryError, NotFoundError, DuplicateError, MappingError)
# │   ├── integrity_classifier.py    # labels for DB constraint violations
# │   └── mapper.py                  # DB errors -> public errors, db_error_handler()

from .base import RepositoryError, NotFoundError, DuplicateError, MappingError
from .mapper import db_error_handler

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "DuplicateError",
    "MappingError",
    "db_error_handler",
]
