from models.backend import Backend

# Backend extension shared by the whole application
backend = Backend()

# Models are imported here so `from models import Property` works everywhere.
# No circular import: the model modules only use `backend`.
from .project_model import Project  # noqa: F401,E402
from .property_model import Property, PropertyType  # noqa: F401,E402
