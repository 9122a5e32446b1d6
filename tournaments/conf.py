from django.conf import settings

SEED_ON_INIT = getattr(settings, "TOURNAMENTS_SEED_ON_INIT", True)
EMPTY_LIST_IS_NOT_FOUND = getattr(settings, "TOURNAMENTS_EMPTY_LIST_IS_NOT_FOUND", True)
