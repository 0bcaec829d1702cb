"""
WSGI config for the Lanchonete project.
"""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'lanchonete.settings')

application = get_wsgi_application()
