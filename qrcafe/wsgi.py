"""
WSGI config for qrcafe project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'qrcafe.settings')

application = get_wsgi_application()
