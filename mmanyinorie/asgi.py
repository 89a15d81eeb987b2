"""
ASGI config for mmanyinorie project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mmanyinorie.settings')

application = get_asgi_application()
