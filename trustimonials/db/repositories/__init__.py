from trustimonials.db.repositories.request_links import RequestLinksRepository
from trustimonials.db.repositories.spaces import SpacesRepository
from trustimonials.db.repositories.templates import TemplatesRepository
from trustimonials.db.repositories.testimonials import TestimonialsRepository
from trustimonials.db.repositories.users import UsersRepository
from trustimonials.db.repositories.widgets import WidgetsRepository

__all__ = [
    "RequestLinksRepository",
    "SpacesRepository",
    "TemplatesRepository",
    "TestimonialsRepository",
    "UsersRepository",
    "WidgetsRepository",
]
