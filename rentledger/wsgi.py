"""
WSGI config for the rentledger project.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'rentledger.settings')

application = get_wsgi_application()
