# medlink/routers/__init__.py
from . import health
from . import auth
from . import appointments
from . import doctor
from . import doctors
from . import hospitals
from . import reviews
from . import specializations

__all__ = ["health", "auth", "appointments", "doctor", "doctors", "hospitals", "reviews", "specializations"]
