from escalas.domain.models import *  # noqa: F401,F403
