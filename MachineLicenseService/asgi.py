"""
ASGI config for MachineLicenseService project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "MachineLicenseService.settings.dev")

application = get_asgi_application()
