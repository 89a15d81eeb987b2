"""
WSGI config for mmanyinorie project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'mmanyinorie.settings')

application = get_wsgi_application()
